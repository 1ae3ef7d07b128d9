"""Normalization: numbers, dates, exercise names, deduplication and canonical ordering."""

from __future__ import annotations

import re
import uuid
from datetime import date, datetime, timezone
from typing import Optional

from .models import DateCandidate, ExtractionData, MetricRecord, SetRecord, WorkoutRecord


def generate_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


# --- Scalars ---

def parse_number(value: str | None) -> float | None:
    """Parse "74.2" or "74,2"; None for anything non-numeric."""
    if value is None:
        return None
    s = value.strip().replace(",", ".")
    if not s:
        return None
    try:
        return float(s)
    except ValueError:
        return None


def parse_int(value: str | None) -> int | None:
    n = parse_number(value)
    if n is None:
        return None
    return int(n)


def format_set_display(s: SetRecord) -> str:
    """Format a set for summaries: "40×10", "BW×10" when no weight was read, "?" when nothing was."""
    if s.reps is None:
        return "?" if s.weight is None else f"{s.weight:g}×?"
    if s.weight is None:
        return f"BW×{s.reps}"
    return f"{s.weight:g}×{s.reps}"


def clean_exercise_name(raw: str) -> str:
    """Strip punctuation, collapse spaces, title-case each word (accents kept)."""
    s = re.sub(r"[^\w\s]", "", raw or "")
    s = re.sub(r"[\d_]+", " ", s)
    s = re.sub(r"\s+", " ", s).strip().lower()
    return " ".join(w[:1].upper() + w[1:] for w in s.split(" ") if w)


# --- Dates ---

DISPLAY_DATE_FORMAT = "%d/%m/%Y"


def _expand_year(year: str) -> str | None:
    if len(year) == 2:
        return f"20{year}"
    if len(year) == 4:
        return year
    return None


def parse_numeric_date(first: str, second: str, third: str) -> date | None:
    """
    Parse the three numeric groups of a date match.
    Leading 4-digit group -> Y/M/D. Otherwise D/M/Y, then M/D/Y when D/M/Y is not a calendar date.
    """
    if len(first) == 4:
        candidates = [(f"{first}/{second}/{third}", "%Y/%m/%d")]
    else:
        year = _expand_year(third)
        if year is None:
            return None
        s = f"{first}/{second}/{year}"
        candidates = [(s, "%d/%m/%Y"), (s, "%m/%d/%Y")]
    for s, fmt in candidates:
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue
    return None


def to_iso_instant(d: date) -> str:
    return datetime(d.year, d.month, d.day, tzinfo=timezone.utc).isoformat()


def format_display_date(d: date) -> str:
    return d.strftime(DISPLAY_DATE_FORMAT)


# --- Deduplication & ordering ---

def dedupe_workouts(workouts: list[WorkoutRecord]) -> list[WorkoutRecord]:
    """Keep the first workout for each (type, date)."""
    seen: set[tuple[str, Optional[str]]] = set()
    out: list[WorkoutRecord] = []
    for w in workouts:
        key = (w.type, w.date)
        if key in seen:
            continue
        seen.add(key)
        out.append(w)
    return out


def dedupe_metrics(metrics: list[MetricRecord]) -> list[MetricRecord]:
    """Keep the first metric for each (type, value)."""
    seen: set[tuple[str, float]] = set()
    out: list[MetricRecord] = []
    for m in metrics:
        key = (m.type, m.value)
        if key in seen:
            continue
        seen.add(key)
        out.append(m)
    return out


def sort_workouts(workouts: list[WorkoutRecord]) -> list[WorkoutRecord]:
    """Date ascending; undated workouts last. Stable."""
    return sorted(workouts, key=lambda w: (w.date is None, w.date or ""))


def sort_dates(dates: list[DateCandidate]) -> list[DateCandidate]:
    """Parsed instant ascending; text-only candidates last. Stable."""
    return sorted(dates, key=lambda d: (d.parsed is None, d.parsed or ""))


def normalize_data(data: ExtractionData) -> ExtractionData:
    """Dedupe and order workouts, metrics and dates. Idempotent."""
    return data.model_copy(update={
        "workouts": sort_workouts(dedupe_workouts(data.workouts)),
        "metrics": dedupe_metrics(data.metrics),
        "dates": sort_dates(data.dates),
    })


# --- Mapping to the application's workout categories ---

# Tag -> category used by the workout store (cardio | force | flexibilite | crosstraining | combat | escalade | autre).
APP_WORKOUT_TYPES: dict[str, str] = {
    "cardio": "cardio",
    "running": "cardio",
    "cycling": "cardio",
    "swimming": "cardio",
    "strength": "force",
    "flexibility": "flexibilite",
    "interval": "crosstraining",
    "combat": "combat",
    "climbing": "escalade",
}


def to_app_workout_type(tag: str | None) -> str:
    """Map a workout-type tag to the application's category; unknown tags map to "autre"."""
    if not tag:
        return "autre"
    return APP_WORKOUT_TYPES.get(tag.strip().lower(), "autre")
