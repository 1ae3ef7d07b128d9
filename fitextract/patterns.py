"""
Entity extraction: tagged pattern tables (French + English) and the pure functions that apply them.

Every table is plain data (tag -> patterns) so vocabulary lives here, not in the assembler's control flow.
Each extractor scans independently; a line may feed several of them.
"""

from __future__ import annotations

import re
from typing import Optional

from .models import DateCandidate, ExerciseRecord, MetricRecord, MetricType, SetRecord
from .normalize import (
    clean_exercise_name,
    format_display_date,
    generate_id,
    parse_int,
    parse_number,
    parse_numeric_date,
    to_iso_instant,
)

NUM = r"\d+(?:[.,]\d+)?"
# Latin letters incl. accents, without × and ÷
LETTERS = r"A-Za-zÀ-ÖØ-öø-ÿŒœ"

# A set count is 1..100; longer or zero numbers are not a count.
SET_COUNT = r"(?<!\d)(100|[1-9]\d?)(?!\d)"


def _keywords(words: tuple[str, ...]) -> re.Pattern[str]:
    # Longest first so "poids corporel" wins over "poids"
    alts = sorted(words, key=len, reverse=True)
    return re.compile(r"\b(?:" + "|".join(re.escape(w) for w in alts) + r")\b", re.IGNORECASE)


# --- Dates ---

WEEKDAYS = (
    "lundi", "mardi", "mercredi", "jeudi", "vendredi", "samedi", "dimanche",
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
)
MONTHS = (
    "janvier", "février", "fevrier", "mars", "avril", "mai", "juin", "juillet", "août", "aout",
    "septembre", "octobre", "novembre", "décembre", "decembre",
    "january", "february", "march", "april", "may", "june", "july", "august",
    "september", "october", "november", "december",
)

# (kind, pattern). "numeric" patterns capture three groups; "name" patterns are text-only.
DATE_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    ("numeric", re.compile(r"\b(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{2,4})\b")),  # D/M/Y
    ("numeric", re.compile(r"\b(\d{4})[/\-.](\d{1,2})[/\-.](\d{1,2})\b")),  # Y/M/D
    ("name", _keywords(WEEKDAYS)),
    ("name", _keywords(MONTHS)),
]


def extract_dates(text: str) -> list[DateCandidate]:
    """All date candidates in text, pattern by pattern. Unparseable numeric matches are dropped."""
    out: list[DateCandidate] = []
    for kind, pattern in DATE_PATTERNS:
        for m in pattern.finditer(text):
            if kind == "name":
                out.append(DateCandidate(original=m.group(0)))
                continue
            d = parse_numeric_date(m.group(1), m.group(2), m.group(3))
            if d is None:
                continue
            out.append(DateCandidate(
                original=m.group(0),
                parsed=to_iso_instant(d),
                formatted=format_display_date(d),
            ))
    return out


def find_date(line: str) -> Optional[str]:
    """First parseable numeric date in line as YYYY-MM-DD, else None."""
    for kind, pattern in DATE_PATTERNS:
        if kind != "numeric":
            continue
        for m in pattern.finditer(line):
            d = parse_numeric_date(m.group(1), m.group(2), m.group(3))
            if d is not None:
                return d.isoformat()
    return None


# --- Workout types ---

# Order matters: the first tag with a matching keyword wins.
WORKOUT_TYPE_KEYWORDS: list[tuple[str, tuple[str, ...]]] = [
    ("cardio", ("cardio", "cardiovasculaire", "endurance", "aérobic", "aerobic", "aérobie")),
    ("strength", ("musculation", "strength", "force", "resistance", "résistance")),
    ("running", ("course", "running", "jogging", "sprint")),
    ("cycling", ("cyclisme", "cycling", "vélo", "velo", "bike")),
    ("swimming", ("natation", "swimming", "nage")),
    ("flexibility", ("yoga", "pilates", "stretching", "étirement", "étirements")),
    ("interval", ("crossfit", "hiit", "interval", "intervals", "fractionné")),
    ("combat", ("boxe", "boxing", "combat", "martial")),
    ("climbing", ("escalade", "climbing", "grimpe")),
    ("team-sport", ("football", "basketball", "tennis", "sport collectif")),
]

_WORKOUT_TYPE_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    (tag, _keywords(words)) for tag, words in WORKOUT_TYPE_KEYWORDS
]

_TYPE_WORDS = frozenset(w for _, words in WORKOUT_TYPE_KEYWORDS for w in words)


def identify_workout_type(line: str) -> Optional[str]:
    for tag, pattern in _WORKOUT_TYPE_PATTERNS:
        if pattern.search(line):
            return tag
    return None


# --- Exercises ---

# Tried in order; the first whose name survives _is_plausible_exercise_name is used.
# (shape, pattern, name group)
EXERCISE_PATTERNS: list[tuple[str, re.Pattern[str], int]] = [
    ("label", re.compile(r"\b(?:exercices?|exercises?)\b[\s:]*([^,\n]+?)(?:\s*[-,]|\s*\d|$)", re.IGNORECASE), 1),
    ("leading_name", re.compile(rf"^([{LETTERS}\s]+?)\s*[-:]?\s*\d"), 1),
    ("sets_x_reps", re.compile(rf"{SET_COUNT}\s*[x×]\s*(\d+)\s*(?:kg|lbs?)?\s*([{LETTERS}][{LETTERS}\s]*)", re.IGNORECASE), 3),
    ("name_dash_count", re.compile(rf"([{LETTERS}\s]+?)\s*[-:]\s*(\d+)\s*(?:séries?|series|sets?|reps?)\b", re.IGNORECASE), 1),
]

SETS_PATTERN = re.compile(SET_COUNT + r"\s*(?:séries?|series|sets?)\b", re.IGNORECASE)
REPS_PATTERN = re.compile(r"(\d+)\s*(?:reps?|répétitions?|repetitions?)\b", re.IGNORECASE)
SETS_X_REPS_PATTERN = re.compile(SET_COUNT + r"\s*[x×]\s*(\d+)", re.IGNORECASE)
WEIGHT_PATTERN = re.compile(rf"({NUM})\s*(?:kg|kgs|lbs?)\b", re.IGNORECASE)

# First words that label something other than an exercise (durations, metrics, set counts, calendar words).
_LABEL_WORDS = frozenset({
    "durée", "duree", "duration", "temps", "time", "calories", "calorie", "kcal",
    "imc", "bmi", "poids", "weight", "masse", "taille", "height", "graisse", "body",
    "vo", "fc", "fréquence", "frequence", "heart", "hr", "distance",
    "série", "séries", "serie", "series", "set", "sets", "rep", "reps", "répétitions", "repetitions",
    "repos", "rest", "total", "page", "date", "semaine", "week",
    "séance", "seance", "session", "bilan",
}) | frozenset(WEEKDAYS) | frozenset(MONTHS)


def _is_plausible_exercise_name(name: str) -> bool:
    """True if name looks like an exercise, not a label, calendar word or bare workout type."""
    n = name.strip().lower()
    if len(n) < 2:
        return False
    if n.split(" ")[0] in _LABEL_WORDS:
        return False
    if n in _TYPE_WORDS:
        return False
    return True


def _build_sets(line: str, shape: str, m: re.Match[str]) -> list[SetRecord]:
    """N identical sets when both a set count N and a rep count are found on the line; else []."""
    n_sets: int | None = None
    reps: int | None = None
    own_weight_at = -1
    if shape == "sets_x_reps":
        n_sets, reps = int(m.group(1)), int(m.group(2))
        own_weight_at = m.start(2)
    else:
        s, r = SETS_PATTERN.search(line), REPS_PATTERN.search(line)
        if s and r:
            n_sets, reps = int(s.group(1)), int(r.group(1))
        else:
            x = SETS_X_REPS_PATTERN.search(line)
            if x:
                n_sets, reps = int(x.group(1)), int(x.group(2))
                own_weight_at = x.start(2)
    if n_sets is None or reps is None:
        return []
    weight: float | None = None
    for w in WEIGHT_PATTERN.finditer(line):
        if w.start() == own_weight_at:
            continue  # "3x10kg": 10 is the rep count
        weight = parse_number(w.group(1))
        break
    return [SetRecord(reps=reps, weight=weight) for _ in range(n_sets)]


def parse_exercise_line(line: str) -> Optional[ExerciseRecord]:
    for shape, pattern, group in EXERCISE_PATTERNS:
        m = pattern.match(line) if shape == "leading_name" else pattern.search(line)
        if not m:
            continue
        name = clean_exercise_name(m.group(group) or "")
        if not _is_plausible_exercise_name(name):
            continue
        return ExerciseRecord(
            id=generate_id("ex"),
            name=name,
            sets=_build_sets(line, shape, m),
        )
    return None


# --- Duration & calories ---

_DURATION_LABEL = r"\b(?:durée|duree|duration|temps|time)\b[\s:]*"
DURATION_PATTERN = re.compile(
    _DURATION_LABEL + r"(\d+)(?::(\d{1,2}))?\s*"
    r"(minutes?|min|mn|secondes?|seconds?|sec|s|heures?|hours?|h)\b",
    re.IGNORECASE,
)
# "1h30", "1 h 30 min"
COMPACT_HOURS_PATTERN = re.compile(_DURATION_LABEL + r"(\d+)\s*h\s*(\d{1,2})\b", re.IGNORECASE)
CALORIE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"\b(?:calories?|kcal)\b[\s:]*(\d+)", re.IGNORECASE),
    re.compile(r"(\d+)\s*kcal\b", re.IGNORECASE),
]


def parse_duration_line(line: str) -> Optional[int]:
    """Duration in seconds. "45 min" -> 2700, "45:30 min" -> 2730, "1:30 h" -> 5400, "1h30" -> 5400, "90 sec" -> 90."""
    m = COMPACT_HOURS_PATTERN.search(line)
    if m:
        return int(m.group(1)) * 3600 + int(m.group(2)) * 60
    m = DURATION_PATTERN.search(line)
    if not m:
        return None
    major = int(m.group(1))
    minor = int(m.group(2)) if m.group(2) else 0
    unit = m.group(3).lower()
    if unit.startswith("h"):
        return major * 3600 + minor * 60
    if unit.startswith("s") and not m.group(2):
        return major
    return major * 60 + minor


def parse_calories_line(line: str) -> Optional[int]:
    for pattern in CALORIE_PATTERNS:
        m = pattern.search(line)
        if m:
            return parse_int(m.group(1))
    return None


# --- Body / fitness metrics ---

# (metric type, pattern). Group 1 = value, optional group 2 = unit.
METRIC_PATTERNS: list[tuple[MetricType, re.Pattern[str]]] = [
    ("bmi", re.compile(rf"\b(?:imc|bmi)\b[\s:]*({NUM})", re.IGNORECASE)),
    ("weight", re.compile(
        rf"\b(?:masse corporelle|poids corporel|body mass|body weight|poids|weight)\b[\s:]*({NUM})\s*(kg|lbs?)\b",
        re.IGNORECASE,
    )),
    ("height", re.compile(rf"\b(?:taille|height)\b[\s:]*({NUM})\s*(cm|m|ft|inches|inch|in)\b", re.IGNORECASE)),
    ("bodyFat", re.compile(rf"\b(?:masse grasse|body fat|graisse)\b[\s:]*({NUM})\s*(%)", re.IGNORECASE)),
    ("muscleMass", re.compile(
        rf"\b(?:masse musculaire|muscle mass)\b[\s:]*({NUM})\s*(kg|lbs?|%)",
        re.IGNORECASE,
    )),
    ("vo2Max", re.compile(rf"\bvo2\s*max\b[\s:]*({NUM})\s*(ml/kg/min)?", re.IGNORECASE)),
    ("heartRate", re.compile(
        r"(?:\bfréquence cardiaque(?: maximale| max)?|\bfc\s*max|\bmax\s*hr|\bhr\s*max|\bheart rate)\b[\s:]*(\d+)\s*(bpm)?",
        re.IGNORECASE,
    )),
]


def extract_metrics(text: str, timestamp: str) -> list[MetricRecord]:
    out: list[MetricRecord] = []
    for metric_type, pattern in METRIC_PATTERNS:
        for m in pattern.finditer(text):
            value = parse_number(m.group(1))
            if value is None:
                continue
            unit = m.group(2) if pattern.groups >= 2 else None
            out.append(MetricRecord(
                id=generate_id("met"),
                type=metric_type,
                value=value,
                unit=unit.lower() if unit else None,
                timestamp=timestamp,
            ))
    return out
