"""OCR fallback: image enhancement (Pillow) and page recognition (Tesseract via pytesseract)."""

from __future__ import annotations

import logging
import shutil
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Optional, Sequence

import pytesseract
from PIL import Image, ImageFilter, ImageOps

from .models import OcrProgress

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGES = "fra+eng"
DEFAULT_THRESHOLD = 128

# (image_path, languages) -> recognized text
Recognizer = Callable[[Path, str], str]
ProgressCallback = Callable[[OcrProgress], None]


def enhance_image(src: str | Path, dst: str | Path, threshold: int = DEFAULT_THRESHOLD) -> Path:
    """
    Greyscale -> contrast normalization -> sharpen -> binarize at threshold, written to dst as PNG.
    If any step fails the original image is copied to dst unchanged.
    """
    src, dst = Path(src), Path(dst)
    try:
        with Image.open(src) as img:
            out = ImageOps.grayscale(img)
            out = ImageOps.autocontrast(out)
            out = out.filter(ImageFilter.SHARPEN)
            out = out.point(lambda p: 255 if p >= threshold else 0)
            out.save(dst, format="PNG")
    except Exception as exc:  # pylint: disable=broad-except
        logger.warning("Enhancement failed for %s (%s); using original image", src.name, exc)
        shutil.copyfile(src, dst)
    return dst


def recognize_image(path: str | Path, languages: str = DEFAULT_LANGUAGES) -> str:
    with Image.open(path) as img:
        return pytesseract.image_to_string(img, lang=languages)


def _notify(progress: Optional[ProgressCallback], event: OcrProgress) -> None:
    if progress is None:
        return
    try:
        progress(event)
    except Exception:  # pylint: disable=broad-except
        logger.warning("OCR progress callback raised; ignoring", exc_info=True)


def recognize_pages(
    pages: Sequence[Path],
    languages: str = DEFAULT_LANGUAGES,
    threshold: int = DEFAULT_THRESHOLD,
    recognizer: Optional[Recognizer] = None,
    progress: Optional[ProgressCallback] = None,
    workers: int = 1,
) -> str:
    """
    Enhance and recognize each page; return the texts in page order, each preceded by "--- Page N ---".
    A page that fails is logged and skipped. With workers > 1 pages run concurrently; output is the same.
    """
    recognize = recognizer or recognize_image
    total = len(pages)

    def _one(index: int, page_path: Path) -> Optional[str]:
        _notify(progress, OcrProgress(page=index, pages=total, status="recognizing text", progress=0.0))
        try:
            enhanced = enhance_image(page_path, page_path.with_name(f"enhanced_{page_path.name}"), threshold)
            text = recognize(enhanced, languages)
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning("OCR failed for page %s/%s: %s", index, total, exc)
            _notify(progress, OcrProgress(page=index, pages=total, status="page failed", progress=1.0))
            return None
        _notify(progress, OcrProgress(page=index, pages=total, status="page done", progress=1.0))
        return text

    indexed = list(enumerate(pages, start=1))
    if workers <= 1 or total <= 1:
        texts = [_one(i, p) for i, p in indexed]
    else:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            texts = list(executor.map(lambda item: _one(*item), indexed))

    parts = [f"\n--- Page {i} ---\n{text}\n" for (i, _), text in zip(indexed, texts) if text is not None]
    ok = sum(1 for t in texts if t is not None)
    logger.info("OCR complete | pages=%s ok=%s failed=%s", total, ok, total - ok)
    return "".join(parts)
