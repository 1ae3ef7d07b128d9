"""Text acquisition from PDFs: embedded text layer, and page rasterization for the OCR fallback."""

from __future__ import annotations

import logging
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import fitz  # PyMuPDF
import pdfplumber

from .errors import ExtractionError

logger = logging.getLogger(__name__)

DEFAULT_RENDER_DPI = 300
TEMP_PREFIX = "fitextract-"


def _text_pdfplumber(path: Path) -> str:
    with pdfplumber.open(path) as pdf:
        return "\n".join(page.extract_text() or "" for page in pdf.pages)


def _text_pymupdf(path: Path) -> str:
    with fitz.open(path) as doc:
        return "\n".join(page.get_text("text") or "" for page in doc)


def extract_text_layer(path: str | Path) -> str:
    """
    Text of the document's embedded text layer. pdfplumber first, PyMuPDF if pdfplumber fails.
    Raises ExtractionError("text-layer") when neither can read it or the layer is empty (image-only PDF).
    """
    path = Path(path)
    try:
        text = _text_pdfplumber(path)
    except Exception as exc:  # pylint: disable=broad-except
        logger.warning("pdfplumber failed for %s (%s), falling back to PyMuPDF text extraction", path, exc)
        try:
            text = _text_pymupdf(path)
        except Exception as exc2:  # pylint: disable=broad-except
            raise ExtractionError("text-layer", f"could not read text layer: {exc2}") from exc2
    if not text.strip():
        raise ExtractionError("text-layer", "document has no text layer")
    logger.info("Extracted %s characters of embedded text from %s", len(text), path.name)
    return text


@contextmanager
def rasterize_pages(
    path: str | Path,
    dpi: int = DEFAULT_RENDER_DPI,
    temp_root: Optional[str | Path] = None,
) -> Iterator[list[Path]]:
    """
    Render every page to PNG inside a fresh temporary directory and yield the paths in page order.
    The directory and its images are removed when the block exits, however it exits.
    Raises ExtractionError("rasterize") if the document cannot be opened or rendered.
    """
    path = Path(path)
    with tempfile.TemporaryDirectory(prefix=TEMP_PREFIX, dir=temp_root) as tmp:
        out_dir = Path(tmp)
        pages: list[Path] = []
        try:
            with fitz.open(path) as doc:
                for index, page in enumerate(doc, start=1):
                    pix = page.get_pixmap(dpi=dpi)
                    page_path = out_dir / f"page_{index:03d}.png"
                    pix.save(str(page_path))
                    pages.append(page_path)
        except Exception as exc:  # pylint: disable=broad-except
            raise ExtractionError("rasterize", f"could not render {path.name}: {exc}") from exc
        logger.info("Rendered %s page(s) of %s at %s dpi", len(pages), path.name, dpi)
        yield pages
