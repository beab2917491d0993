"""
dirzip/api.py

HTTP endpoint that streams a served directory back as a ZIP download.

Request paths are resolved against ``ZipDirConfig.serve_root`` (stored
on ``app.state.config`` by create_app) and may not escape it.
"""

from __future__ import annotations

import os
from typing import Dict, Optional, Type

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import Response

from .config import ZipDirConfig
from .core import ZipDirOptions, archive_directory
from .errors import (
    EmptyRootError,
    RootNotADirectoryError,
    RootNotFoundError,
    ZipDirError,
)
from .models import ArchiveRequest, ErrorDetail, ErrorResponse
from .walker import EntryStat

router = APIRouter(prefix="/api/v1", tags=["archive"])

_STATUS_BY_ERROR: Dict[Type[ZipDirError], int] = {
    RootNotFoundError: 404,
    RootNotADirectoryError: 400,
    EmptyRootError: 422,
}


def _status_for(exc: ZipDirError) -> int:
    for kind, status in _STATUS_BY_ERROR.items():
        if isinstance(exc, kind):
            return status
    return 500


def _resolve_under(root: str, rel: str) -> str:
    """
    Translate a request path into a filesystem path under ``root``.

    Ensures:
      - no leading slash
      - no Windows backslashes
      - no path traversal, including through symlinks
    """
    base = os.path.realpath(root)
    rel = rel.strip().replace("\\", "/").strip("/")
    path = os.path.realpath(os.path.join(base, rel))

    if path != base and not path.startswith(base + os.sep):
        raise HTTPException(400, f"Path escapes serve root: {rel}")
    return path


def _suffix_filter(suffixes: Optional[list]):
    if not suffixes:
        return None
    wanted = {s.lower() for s in suffixes}

    def _accept(path: str, stat: EntryStat) -> bool:
        return stat.is_dir or os.path.splitext(path)[1].lower() in wanted

    return _accept


@router.post(
    "/archive",
    response_class=Response,
    responses={
        200: {"content": {"application/zip": {}}},
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def archive_endpoint(body: ArchiveRequest, request: Request) -> Response:
    """
    Archive a directory below the serve root and return it as application/zip.

    Error mapping:
        404 missing directory, 400 not a directory or bad path,
        422 empty root with no_empty_directories, 500 anything else.
    """
    config: ZipDirConfig = request.app.state.config
    target = _resolve_under(config.serve_root, body.path)

    counter = {"entries": 0}

    def _count(_path: str) -> None:
        counter["entries"] += 1

    options = ZipDirOptions(
        filter=_suffix_filter(body.include_suffixes),
        each=_count,
        no_empty_directories=body.no_empty_directories,
        config=config,
    )

    try:
        buffer = await archive_directory(target, options)
    except ZipDirError as exc:
        raise HTTPException(
            status_code=_status_for(exc),
            detail=ErrorDetail(
                error=exc.message, kind=type(exc).__name__, path=body.path
            ).model_dump(),
        ) from exc

    filename = body.filename or f"{os.path.basename(target) or 'archive'}.zip"
    return Response(
        content=buffer,
        media_type="application/zip",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "X-Entry-Count": str(counter["entries"]),
        },
    )


__all__ = ["router"]
