"""
Global configuration settings for dirzip.

This module centralizes configuration for:

    - the ZIP compression method and level
    - the directory served by the HTTP surface
    - feature flags (logging)

It provides:
    ZipDirConfig       – structured config object
    load_config()      – load from environment variables or defaults
    configure_logging() – enable INFO logging when the flag is set

The archive core never reads the environment itself. Callers pass a
ZipDirConfig (or rely on its defaults); only the HTTP app factory
calls load_config().
"""

from __future__ import annotations

import logging
import os
import zipfile
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


_COMPRESSION_METHODS = {
    "stored": zipfile.ZIP_STORED,
    "deflated": zipfile.ZIP_DEFLATED,
    "bzip2": zipfile.ZIP_BZIP2,
    "lzma": zipfile.ZIP_LZMA,
}


@dataclass
class ZipDirConfig:
    """
    Canonical configuration for dirzip.

    Attributes
    ----------
    compression:
        Name of the ZIP compression method: "stored", "deflated",
        "bzip2" or "lzma".

    compress_level:
        Optional compression level passed through to zipfile.
        None uses the method's default.

    serve_root:
        Directory that the HTTP surface resolves request paths against.
        Requests may not escape it.

    enable_logging:
        Whether to enable INFO level logging on startup.
    """

    compression: str = "deflated"
    compress_level: Optional[int] = None

    serve_root: str = "."

    enable_logging: bool = False

    @property
    def compression_method(self) -> int:
        """Return the zipfile constant for ``compression``."""
        key = self.compression.strip().lower()
        try:
            return _COMPRESSION_METHODS[key]
        except KeyError:
            raise ValueError(
                f"Unknown compression method: {self.compression!r} "
                f"(expected one of {sorted(_COMPRESSION_METHODS)})"
            ) from None


def load_config() -> ZipDirConfig:
    """
    Load ZipDirConfig from environment variables, falling back to defaults.

    Recognized variables:
        DIRZIP_COMPRESSION      (stored|deflated|bzip2|lzma)
        DIRZIP_COMPRESS_LEVEL   (integer)
        DIRZIP_SERVE_ROOT       (directory path)
        DIRZIP_ENABLE_LOGGING   ("true" / "false" / "1" / "0")

    Returns
    -------
    ZipDirConfig
    """

    def _env_flag(name: str, default: bool) -> bool:
        val = os.getenv(name)
        if val is None:
            return default
        return val.strip().lower() in ("1", "true", "yes", "on")

    def _env_int(name: str) -> Optional[int]:
        val = os.getenv(name)
        if val is None or not val.strip():
            return None
        return int(val)

    return ZipDirConfig(
        compression=os.getenv("DIRZIP_COMPRESSION", "deflated"),
        compress_level=_env_int("DIRZIP_COMPRESS_LEVEL"),

        serve_root=os.getenv("DIRZIP_SERVE_ROOT", "."),

        enable_logging=_env_flag(
            "DIRZIP_ENABLE_LOGGING",
            default=False
        ),
    )


def configure_logging(config: ZipDirConfig) -> None:
    """Turn on INFO logging when ``config.enable_logging`` is set."""
    if config.enable_logging:
        logging.basicConfig(level=logging.INFO)
        logger.info("dirzip logging enabled with config: %s", config)


__all__ = [
    "ZipDirConfig",
    "load_config",
    "configure_logging",
]
