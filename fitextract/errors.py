"""Stage-tagged extraction error."""

from __future__ import annotations

from typing import Literal

Stage = Literal["text-layer", "rasterize", "ocr", "no-text"]


class ExtractionError(Exception):
    """Failure of one pipeline stage. str() renders as "<stage>: <message>"."""

    def __init__(self, stage: Stage, message: str):
        super().__init__(message)
        self.stage = stage
        self.message = message

    def __str__(self) -> str:
        return f"{self.stage}: {self.message}"
