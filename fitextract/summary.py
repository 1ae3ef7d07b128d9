"""Summary over a normalized ExtractionData (counts, date range, distinct types)."""

from __future__ import annotations

from .models import DateRange, ExtractionData, Summary


def _distinct(values: list[str]) -> list[str]:
    """Distinct values in first-seen order."""
    return list(dict.fromkeys(values))


def build_summary(data: ExtractionData) -> Summary:
    """Expects data.dates already sorted (see normalize.sort_dates)."""
    formatted = [d.formatted for d in data.dates if d.parsed and d.formatted]
    date_range = DateRange(start=formatted[0], end=formatted[-1]) if formatted else None
    return Summary(
        total_workouts=len(data.workouts),
        total_exercises=sum(len(w.exercises) for w in data.workouts),
        total_metrics=len(data.metrics),
        date_range=date_range,
        workout_types=_distinct([w.type for w in data.workouts]),
        metric_types=_distinct([m.type for m in data.metrics]),
    )
