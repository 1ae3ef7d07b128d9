"""Extraction workflow: text layer -> optional OCR fallback -> entities -> workouts -> normalize -> summary."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

from . import acquire
from .assemble import assemble_workouts
from .config import ExtractionSettings
from .errors import ExtractionError
from .models import ExtractionData, ExtractionResult, ExtractOptions
from .normalize import generate_id, normalize_data
from .ocr import ProgressCallback, Recognizer, recognize_pages
from .patterns import extract_dates, extract_metrics
from .summary import build_summary

logger = logging.getLogger(__name__)

# (document_path) -> embedded text; swappable for tests
TextLayerFn = Callable[[Path], str]


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def needs_ocr(raw_text: str, min_length: int) -> bool:
    return len(raw_text.strip()) < min_length


def run_ocr(
    path: Path,
    settings: ExtractionSettings,
    recognizer: Optional[Recognizer] = None,
    progress: Optional[ProgressCallback] = None,
) -> str:
    """
    Rasterize into a scoped temp dir, recognize every page, release the dir.
    Raises ExtractionError only; anything else (temp dir, disk, cleanup) is reported as stage "ocr".
    """
    try:
        with acquire.rasterize_pages(path, dpi=settings.ocr_dpi, temp_root=settings.temp_dir) as pages:
            if not pages:
                return ""
            return recognize_pages(
                pages,
                languages=settings.ocr_languages,
                threshold=settings.binarize_threshold,
                recognizer=recognizer,
                progress=progress,
                workers=settings.ocr_workers,
            )
    except ExtractionError:
        raise
    except Exception as exc:  # pylint: disable=broad-except
        raise ExtractionError("ocr", f"OCR fallback failed: {exc}") from exc


def extract_from_text(text: str, raw_text: str = "", ocr_text: str = "", timestamp: str | None = None) -> ExtractionData:
    """Entity extraction, assembly, normalization and summary over already-acquired text. Pure except ids."""
    timestamp = timestamp or _now_iso()
    data = ExtractionData(
        raw_text=raw_text,
        ocr_text=ocr_text,
        dates=extract_dates(text),
        workouts=assemble_workouts(text),
        metrics=extract_metrics(text, timestamp),
    )
    data = normalize_data(data)
    return data.model_copy(update={"summary": build_summary(data)})


def extract(
    document_path: str | Path,
    options: Optional[ExtractOptions] = None,
    *,
    settings: Optional[ExtractionSettings] = None,
    recognizer: Optional[Recognizer] = None,
    progress: Optional[ProgressCallback] = None,
    text_layer: Optional[TextLayerFn] = None,
) -> ExtractionResult:
    """
    Extract workouts, metrics and dates from a fitness report. Never raises.
    success is False only when neither the text layer nor OCR produced any text
    (or an unexpected internal error occurred); errors lists every stage failure.
    options does not change behaviour (preview/preserve flags are for the caller).
    """
    options = options or ExtractOptions()
    settings = settings or ExtractionSettings.from_env()
    read_text_layer = text_layer or acquire.extract_text_layer
    path = Path(document_path)
    timestamp = _now_iso()
    result = ExtractionResult(
        id=generate_id("ext"),
        filename=path.name,
        timestamp=timestamp,
        success=False,
    )
    logger.info("Starting extraction %s for %s (user=%s)", result.id, path.name, options.user_id or "-")

    try:
        raw_text = ""
        try:
            raw_text = read_text_layer(path)
        except ExtractionError as exc:
            logger.warning("Direct text extraction failed, will rely on OCR: %s", exc)
            result.errors.append(str(exc))

        ocr_text = ""
        if needs_ocr(raw_text, settings.min_text_length):
            try:
                ocr_text = run_ocr(path, settings, recognizer=recognizer, progress=progress)
            except ExtractionError as exc:
                logger.warning("OCR fallback failed: %s", exc)
                result.errors.append(str(exc))
        result.data = ExtractionData(raw_text=raw_text, ocr_text=ocr_text)

        combined = "\n".join([raw_text, ocr_text]).strip()
        if not combined:
            raise ExtractionError("no-text", "no text could be extracted from the document")

        result.data = extract_from_text(combined, raw_text=raw_text, ocr_text=ocr_text, timestamp=timestamp)
        result.success = True
    except ExtractionError as exc:
        logger.error("Extraction %s failed: %s", result.id, exc)
        result.errors.append(str(exc))
    except Exception as exc:  # pylint: disable=broad-except
        logger.exception("Extraction %s failed unexpectedly", result.id)
        result.errors.append(f"internal: {exc}")
        result.success = False

    if result.success:
        s = result.data.summary
        logger.info(
            "Extraction %s complete | workouts=%s exercises=%s metrics=%s errors=%s",
            result.id, s.total_workouts, s.total_exercises, s.total_metrics, len(result.errors),
        )
    return result
