#!/usr/bin/env python3
"""
Run PDF reports through fitextract and print what was found. Uses the fitextract package directly
(no MCP server needed). Usage: python scripts/extract_sample.py [--json] <pdf or dir> [...]
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

# Project root = parent of scripts/
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from fitextract.config import ExtractionSettings, configure_logging
from fitextract.extract import extract
from fitextract.models import ExtractOptions
from fitextract.normalize import format_set_display


def iter_pdfs(targets: list[Path]):
    for target in targets:
        if target.is_dir():
            yield from sorted(target.rglob("*.pdf"))
        else:
            yield target


def main() -> None:
    parser = argparse.ArgumentParser(description="Extract workouts and metrics from fitness report PDFs")
    parser.add_argument("paths", nargs="+", type=Path, help="PDF files or directories containing PDFs")
    parser.add_argument("--json", action="store_true", help="Print the full result envelope as JSON")
    args = parser.parse_args()

    settings = ExtractionSettings.from_env()
    configure_logging(settings.log_level)
    options = ExtractOptions(preview_mode=True)

    failures = 0
    for path in iter_pdfs(args.paths):
        result = extract(path, options, settings=settings)
        if args.json:
            print(json.dumps(result.model_dump(), ensure_ascii=False, indent=2))
            continue

        print(f"\n{'='*60}")
        print(f"FILE: {path}")
        print("=" * 60)
        s = result.data.summary
        print(f"Success: {'yes' if result.success else 'no'}")
        print(f"Text: direct={len(result.data.raw_text)} chars  ocr={len(result.data.ocr_text)} chars")
        print(f"Summary: workouts={s.total_workouts}  exercises={s.total_exercises}  metrics={s.total_metrics}")
        if s.date_range:
            print(f"Dates: {s.date_range.start} -> {s.date_range.end}")
        if result.errors:
            print("Errors:")
            for e in result.errors:
                print(f"  - {e}")
        for w in result.data.workouts[:5]:
            print(f"  [{w.type}] date={w.date or '?'}  duration={w.duration}  calories={w.calories}")
            for ex in w.exercises[:5]:
                sets_str = ", ".join(format_set_display(st) for st in ex.sets[:5])
                print(f"    {ex.name}: {sets_str or '-'}")
        for m in result.data.metrics:
            print(f"  {m.type}: {m.value:g} {m.unit or ''}".rstrip())
        if not result.success:
            failures += 1

    sys.exit(1 if failures else 0)


if __name__ == "__main__":
    main()
