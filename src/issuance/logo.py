"""Organisation logo resolution for issued PDFs.

Never raises: any missing path, fetch failure or unsupported file type falls
back to the bundled default logo so issuing is never blocked by branding.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import structlog

logger = structlog.get_logger(__name__)

DEFAULT_LOGO_PATH = Path(__file__).parent / "assets" / "default_logo.png"

LogoFetcher = Callable[[str], bytes]

MIME_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
}


@dataclass(frozen=True)
class LogoResult:
    data: bytes
    mime: str
    is_default: bool
    source: Optional[str] = None


def default_logo() -> LogoResult:
    return LogoResult(data=DEFAULT_LOGO_PATH.read_bytes(), mime="image/png", is_default=True)


def resolve_logo(path: Optional[str], fetcher: Optional[LogoFetcher] = None) -> LogoResult:
    """Fetch the organisation logo, falling back to the default."""
    if not path or fetcher is None:
        return default_logo()

    mime = MIME_TYPES.get(Path(path).suffix.lower())
    if mime is None:
        logger.warning("logo_unsupported_type", path=path)
        return default_logo()

    try:
        data = fetcher(path)
    except Exception as e:
        logger.warning("logo_fetch_failed", path=path, error=str(e))
        return default_logo()

    if not data:
        logger.warning("logo_empty", path=path)
        return default_logo()

    return LogoResult(data=data, mime=mime, is_default=False, source=path)
