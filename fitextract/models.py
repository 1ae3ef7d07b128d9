"""Pydantic models for fitextract: extraction options, records, and the result envelope."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field


WorkoutType = Literal[
    "cardio",
    "strength",
    "running",
    "cycling",
    "swimming",
    "flexibility",
    "interval",
    "combat",
    "climbing",
    "team-sport",
    "unknown",
]

MetricType = Literal[
    "bmi",
    "weight",
    "height",
    "bodyFat",
    "muscleMass",
    "vo2Max",
    "heartRate",
    "other",
]


# --- Caller input (extract) ---

class ExtractOptions(BaseModel):
    """Caller hints; the core behaves identically whatever their values."""
    user_id: Optional[str] = None
    preserve_original: bool = False
    preview_mode: bool = False  # caller should not persist results


class ExtractDocumentInput(BaseModel):
    path: str
    options: Optional[ExtractOptions] = None


class ParseTextInput(BaseModel):
    text: str


# --- Structured records ---

class SetRecord(BaseModel):
    reps: Optional[int] = None
    weight: Optional[float] = None  # as written in the document; units are not converted
    rest_time: Optional[int] = None  # seconds


class ExerciseRecord(BaseModel):
    id: str
    name: str  # title case, punctuation stripped
    sets: list[SetRecord] = Field(default_factory=list)
    notes: list[str] = Field(default_factory=list)


class WorkoutRecord(BaseModel):
    id: str
    type: WorkoutType
    date: Optional[str] = None  # YYYY-MM-DD when a date was seen before the type keyword
    exercises: list[ExerciseRecord] = Field(default_factory=list)
    duration: Optional[int] = None  # seconds
    calories: Optional[int] = None
    notes: list[str] = Field(default_factory=list)


class MetricRecord(BaseModel):
    id: str
    type: MetricType
    value: float
    unit: Optional[str] = None
    timestamp: str  # ISO-8601, time of extraction


class DateCandidate(BaseModel):
    original: str
    parsed: Optional[str] = None  # ISO instant; null for weekday/month-name matches
    formatted: Optional[str] = None  # dd/mm/YYYY


class DateRange(BaseModel):
    start: str  # dd/mm/YYYY
    end: str    # dd/mm/YYYY


class Summary(BaseModel):
    total_workouts: int = 0
    total_exercises: int = 0
    total_metrics: int = 0
    date_range: Optional[DateRange] = None
    workout_types: list[str] = Field(default_factory=list)
    metric_types: list[str] = Field(default_factory=list)


class ExtractionData(BaseModel):
    raw_text: str = ""
    ocr_text: str = ""
    workouts: list[WorkoutRecord] = Field(default_factory=list)
    metrics: list[MetricRecord] = Field(default_factory=list)
    dates: list[DateCandidate] = Field(default_factory=list)
    summary: Summary = Field(default_factory=Summary)


# --- Extract output ---

class ExtractionResult(BaseModel):
    id: str
    filename: str
    timestamp: str  # ISO-8601
    success: bool
    data: ExtractionData = Field(default_factory=ExtractionData)
    errors: list[str] = Field(default_factory=list)


# --- OCR progress observer payload ---

class OcrProgress(BaseModel):
    page: int  # 1-based
    pages: int
    status: Literal["recognizing text", "page done", "page failed"]
    progress: float = 0.0  # 0.0–1.0 within the page
