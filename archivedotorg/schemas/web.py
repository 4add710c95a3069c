from typing import Dict, List

from pydantic import BaseModel, Field


class SaveOptions(BaseModel):
    # Also capture the pages the target links to
    save_out_links: bool = False
    # Keep the capture even when the target answers 4xx/5xx
    save_error_pages: bool = False
    save_screenshot: bool = False

    def values(self) -> Dict[str, str]:
        values: Dict[str, str] = {}
        if self.save_out_links:
            values["capture_outlinks"] = "on"
        if self.save_error_pages:
            values["capture_all"] = "on"
        if self.save_screenshot:
            values["capture_screenshot"] = "on"
        return values


class SaveResult(BaseModel):
    status_code: int
    # Lower-cased names; repeated headers such as Set-Cookie keep every value
    headers: Dict[str, List[str]] = Field(default_factory=dict)
