"""MCP server: fitextract.extract_document and fitextract.parse_text."""

from __future__ import annotations

from fastmcp import FastMCP

from .config import ExtractionSettings, configure_logging
from .extract import extract, extract_from_text
from .models import ExtractDocumentInput, ParseTextInput
from .normalize import to_app_workout_type

mcp = FastMCP(name="fitextract")


@mcp.tool(name="fitextract.extract_document")
def fitextract_extract_document(payload: dict) -> dict:
    """
    Extract workouts, exercises, dates and body metrics from a fitness report PDF on local disk.
    Payload: { path, options?: { user_id, preserve_original, preview_mode } }.
    Returns the result envelope { id, filename, timestamp, success, data, errors }; success=false
    only when no text at all could be read (text layer and OCR both empty).
    Each workout additionally carries app_type, the application's coarser category.
    """
    inp = ExtractDocumentInput.model_validate(payload)
    result = extract(inp.path, inp.options)
    out = result.model_dump()
    for workout in out["data"]["workouts"]:
        workout["app_type"] = to_app_workout_type(workout["type"])
    return out


@mcp.tool(name="fitextract.parse_text")
def fitextract_parse_text(payload: dict) -> dict:
    """
    Run entity extraction and workout assembly over plain text (no PDF, no OCR).
    Payload: { text }. Returns { raw_text, ocr_text, workouts, metrics, dates, summary }.
    """
    inp = ParseTextInput.model_validate(payload)
    data = extract_from_text(inp.text, raw_text=inp.text)
    return data.model_dump()


def run() -> None:
    """Run the MCP server with stdio transport (default)."""
    configure_logging(ExtractionSettings.from_env().log_level)
    mcp.run()


if __name__ == "__main__":
    run()
