#!/usr/bin/env python
"""
Upload one local file to an archive.org item.

Credentials come from IA_S3_ACCESS_KEY / IA_S3_SECRET_KEY (environment or .env).
    python scripts/upload_file.py ./talk.mp4 --title "My Talk" --collection opensource_movies
"""
import argparse
import asyncio
import datetime
import logging
import sys
from pathlib import Path

from archivedotorg.core.exceptions import ArchiveError
from archivedotorg.schemas.s3 import Collection, UploadOptions
from archivedotorg.services.s3_client import ArchiveS3Client
from archivedotorg.services.upload_sources import FileSource

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("upload_file")


def parse_metadata(pairs):
    metadata = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise argparse.ArgumentTypeError(f"--meta expects key=value, got {pair!r}")
        metadata.setdefault(key, []).append(value)
    return metadata


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Upload a file to archive.org over IAS3")
    parser.add_argument("path", type=Path)
    parser.add_argument("--file-name", default=None, help="Name inside the item (default: the local file name)")
    parser.add_argument("--identifier", default="")
    parser.add_argument("--title", default="")
    parser.add_argument("--description", default="")
    parser.add_argument("--creator", default="")
    parser.add_argument("--date", type=datetime.date.fromisoformat, default=None, help="YYYY-MM-DD")
    parser.add_argument("--subject", action="append", default=[], help="Repeat for several subject tags")
    parser.add_argument("--meta", action="append", default=[], help="key=value, repeatable")
    parser.add_argument("--collection", default=Collection.DATA.value)
    parser.add_argument("--scanner", default="")
    parser.add_argument("--auto-make-bucket", action="store_true")
    parser.add_argument("--keep-old-version", action="store_true")
    parser.add_argument("--skip-derive", action="store_true")
    parser.add_argument("--skip-unique-check", action="store_true")
    return parser


async def main() -> int:
    parser = build_parser()
    args = parser.parse_args()
    try:
        metadata = parse_metadata(args.meta)
    except argparse.ArgumentTypeError as exc:
        parser.error(str(exc))

    client = ArchiveS3Client()
    with args.path.open("rb") as f:
        opts = UploadOptions(
            upload=FileSource(f),
            file_name=args.file_name or args.path.name,
            identifier=args.identifier,
            title=args.title,
            description=args.description,
            subject_tags=args.subject,
            creator=args.creator,
            date=args.date,
            metadata=metadata,
            collection=args.collection,
            scanner=args.scanner,
            auto_make_bucket=args.auto_make_bucket,
            keep_old_version=args.keep_old_version,
            skip_derive=args.skip_derive,
            skip_unique_check=args.skip_unique_check,
        )
        try:
            result = await client.upload(opts)
        except ArchiveError:
            logger.exception("Upload of %s failed", args.path)
            return 1

    print(f"https://archive.org/details/{result.identifier}")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
