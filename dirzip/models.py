"""
Pydantic models for the HTTP surface.

ArchiveRequest is the body of POST /api/v1/archive; ErrorResponse
describes the JSON body returned with 4xx/5xx archive failures.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class ArchiveRequest(BaseModel):
    path: str = Field(
        default=".",
        description="Directory to archive, relative to the configured serve root.",
    )
    no_empty_directories: bool = False
    include_suffixes: Optional[List[str]] = Field(
        default=None,
        description="Only add files with these suffixes (e.g. ['.json']). Directories are always walked.",
    )
    filename: Optional[str] = Field(
        default=None,
        description="Download name; defaults to '<directory>.zip'.",
    )


class ErrorDetail(BaseModel):
    error: str
    kind: str
    path: Optional[str] = None


class ErrorResponse(BaseModel):
    detail: ErrorDetail
