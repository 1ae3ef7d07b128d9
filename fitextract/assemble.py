"""Workout assembly: one pass over the lines, grouping entities into WorkoutRecords."""

from __future__ import annotations

from typing import Iterable, Optional

from .models import WorkoutRecord
from .normalize import generate_id
from .patterns import (
    find_date,
    identify_workout_type,
    parse_calories_line,
    parse_duration_line,
    parse_exercise_line,
)


class WorkoutAssembler:
    """
    Line-oriented state machine. States: no open workout / workout open.

    - a date on any line becomes the sticky current date
    - a workout-type keyword closes the open workout and opens a new one dated current_date
    - while a workout is open, the same line may add an exercise and set duration / calories
    - finish() closes the open workout
    No backtracking: lines consumed before a type switch stay with the earlier workout.
    """

    def __init__(self) -> None:
        self.current_date: Optional[str] = None
        self.current_workout: Optional[WorkoutRecord] = None
        self.workouts: list[WorkoutRecord] = []

    def feed(self, line: str) -> None:
        line = line.strip()
        if not line:
            return
        date = find_date(line)
        if date:
            self.current_date = date
        workout_type = identify_workout_type(line)
        if workout_type:
            self._close()
            self.current_workout = WorkoutRecord(
                id=generate_id("wo"),
                type=workout_type,
                date=self.current_date,
            )
        if self.current_workout is None:
            return
        exercise = parse_exercise_line(line)
        if exercise:
            self.current_workout.exercises.append(exercise)
        duration = parse_duration_line(line)
        if duration is not None:
            self.current_workout.duration = duration
        calories = parse_calories_line(line)
        if calories is not None:
            self.current_workout.calories = calories

    def finish(self) -> list[WorkoutRecord]:
        self._close()
        return self.workouts

    def _close(self) -> None:
        if self.current_workout is not None:
            self.workouts.append(self.current_workout)
            self.current_workout = None


def assemble_workouts(lines: str | Iterable[str]) -> list[WorkoutRecord]:
    """Assemble workouts from raw text (split on newlines) or an iterable of lines."""
    if isinstance(lines, str):
        lines = lines.splitlines()
    assembler = WorkoutAssembler()
    for line in lines:
        assembler.feed(line)
    return assembler.finish()
