"""Runtime settings (FITEXTRACT_* environment variables) and logging setup for entry points."""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"


class ExtractionSettings(BaseModel):
    min_text_length: int = Field(default=100, ge=0)  # below this the OCR fallback runs
    ocr_dpi: int = Field(default=300, ge=72)
    ocr_languages: str = "fra+eng"
    binarize_threshold: int = Field(default=128, ge=0, le=255)
    ocr_workers: int = Field(default=1, ge=1)
    temp_dir: Optional[str] = None  # parent for scoped temp dirs; None = system default
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "ExtractionSettings":
        """Build settings from FITEXTRACT_* env vars; unparseable numbers keep their default."""
        defaults = cls()
        return cls(
            min_text_length=_env_int("FITEXTRACT_MIN_TEXT_LENGTH", defaults.min_text_length, 0),
            ocr_dpi=_env_int("FITEXTRACT_OCR_DPI", defaults.ocr_dpi, 72),
            ocr_languages=os.environ.get("FITEXTRACT_OCR_LANGUAGES", "").strip() or defaults.ocr_languages,
            binarize_threshold=_env_int("FITEXTRACT_BINARIZE_THRESHOLD", defaults.binarize_threshold, 0, 255),
            ocr_workers=_env_int("FITEXTRACT_OCR_WORKERS", defaults.ocr_workers, 1),
            temp_dir=os.environ.get("FITEXTRACT_TEMP_DIR", "").strip() or None,
            log_level=os.environ.get("FITEXTRACT_LOG_LEVEL", "").strip().upper() or defaults.log_level,
        )


def _env_int(name: str, default: int, lo: int, hi: Optional[int] = None) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r (not an integer); using %s", name, raw, default)
        return default
    if value < lo or (hi is not None and value > hi):
        logger.warning("Ignoring %s=%s (out of range); using %s", name, value, default)
        return default
    return value


def configure_logging(level: str = "INFO") -> None:
    """Attach a stderr handler to the root logger. Call from entry points only."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
    )
