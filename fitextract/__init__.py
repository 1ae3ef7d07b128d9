"""fitextract: best-effort workout and body-metric extraction from fitness report PDFs."""

__version__ = "1.0.0"
