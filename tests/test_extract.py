"""Extraction workflow with mocked text layer and recognizer."""

from pathlib import Path

import fitz
import pytest

from fitextract.config import ExtractionSettings
from fitextract.errors import ExtractionError
from fitextract.extract import extract, extract_from_text, needs_ocr, run_ocr
from fitextract.models import ExtractOptions

SHORT_SESSION = "12/03/2024 musculation\nSquat - 3 séries 5 reps 60kg"

LONG_REPORT = "\n".join([
    "Rapport hebdomadaire",
    "12/03/2024 musculation",
    "Développé couché - 3 séries 10 reps 40kg",
    "durée: 45 min",
    "14/03/2024",
    "Course à pied",
    "temps: 32:10 min",
    "calories: 410",
    "IMC: 23.5",
    "Poids: 74.2 kg",
])


def _blank_pdf(path: Path, n_pages: int) -> Path:
    doc = fitz.open()
    for _ in range(n_pages):
        doc.new_page()
    doc.save(str(path))
    doc.close()
    return path


@pytest.fixture
def settings(tmp_path: Path) -> ExtractionSettings:
    root = tmp_path / "scratch"
    root.mkdir()
    return ExtractionSettings(ocr_dpi=72, temp_dir=str(root))


def _failing_recognizer(path: Path, languages: str) -> str:
    raise RuntimeError("no tesseract here")


def test_needs_ocr_threshold() -> None:
    assert needs_ocr("", 100)
    assert needs_ocr("x" * 99 + "   ", 100)
    assert not needs_ocr("x" * 100, 100)


def test_ocr_runs_once_per_page_when_text_layer_short(tmp_path: Path, settings: ExtractionSettings) -> None:
    pdf = _blank_pdf(tmp_path / "scan.pdf", 3)
    calls: list[Path] = []

    def recognizer(path: Path, languages: str) -> str:
        calls.append(path)
        return "cardio" if path.name.endswith("001.png") else ""

    result = extract(pdf, settings=settings, text_layer=lambda p: "short", recognizer=recognizer)
    assert len(calls) == 3
    assert result.success
    assert result.data.raw_text == "short"
    assert result.data.ocr_text.startswith("\n--- Page 1 ---\ncardio\n")
    assert [w.type for w in result.data.workouts] == ["cardio"]


def test_ocr_skipped_when_text_layer_long_enough(tmp_path: Path, settings: ExtractionSettings) -> None:
    calls: list[Path] = []

    def recognizer(path: Path, languages: str) -> str:
        calls.append(path)
        return ""

    result = extract(tmp_path / "report.pdf", settings=settings, text_layer=lambda p: LONG_REPORT, recognizer=recognizer)
    assert calls == []
    assert result.success
    assert result.errors == []
    assert result.data.ocr_text == ""
    assert [(w.type, w.date) for w in result.data.workouts] == [("strength", "2024-03-12"), ("running", "2024-03-14")]
    assert result.data.workouts[1].duration == 1930
    assert result.data.workouts[1].calories == 410
    assert [m.type for m in result.data.metrics] == ["bmi", "weight"]
    s = result.data.summary
    assert (s.total_workouts, s.total_exercises, s.total_metrics) == (2, 1, 2)
    assert s.date_range is not None and s.date_range.start == "12/03/2024"


def test_same_content_in_text_layer_and_ocr_is_deduplicated(tmp_path: Path, settings: ExtractionSettings) -> None:
    pdf = _blank_pdf(tmp_path / "mixed.pdf", 1)
    result = extract(
        pdf,
        settings=settings,
        text_layer=lambda p: SHORT_SESSION,
        recognizer=lambda p, lang: SHORT_SESSION,
    )
    assert result.success
    assert len(result.data.workouts) == 1
    workout = result.data.workouts[0]
    assert (workout.type, workout.date) == ("strength", "2024-03-12")
    assert result.data.summary.total_workouts == 1


def test_text_layer_failure_is_recorded_and_ocr_used(tmp_path: Path, settings: ExtractionSettings) -> None:
    pdf = _blank_pdf(tmp_path / "scan.pdf", 1)

    def no_layer(path: Path) -> str:
        raise ExtractionError("text-layer", "document has no text layer")

    result = extract(pdf, settings=settings, text_layer=no_layer, recognizer=lambda p, lang: "yoga\ndurée: 30 min")
    assert result.success
    assert result.errors == ["text-layer: document has no text layer"]
    assert result.data.workouts[0].type == "flexibility"
    assert result.data.workouts[0].duration == 1800


def test_scratch_directory_empty_after_run(tmp_path: Path, settings: ExtractionSettings) -> None:
    pdf = _blank_pdf(tmp_path / "scan.pdf", 2)
    extract(pdf, settings=settings, text_layer=lambda p: "", recognizer=lambda p, lang: "cardio")
    assert list(Path(settings.temp_dir).iterdir()) == []


@pytest.mark.parametrize("content", [b"", b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog", b"\x89garbage\x00\xff" * 50])
def test_unreadable_documents_never_raise(tmp_path: Path, settings: ExtractionSettings, content: bytes) -> None:
    bad = tmp_path / "bad.pdf"
    bad.write_bytes(content)
    result = extract(bad, settings=settings, recognizer=_failing_recognizer)
    assert result.success is False
    assert result.errors
    assert result.errors[-1] == "no-text: no text could be extracted from the document"
    assert result.data.workouts == [] and result.data.metrics == []
    assert list(Path(settings.temp_dir).iterdir()) == []


def test_missing_file_reports_every_stage(tmp_path: Path, settings: ExtractionSettings) -> None:
    result = extract(tmp_path / "nope.pdf", settings=settings, recognizer=_failing_recognizer)
    assert result.success is False
    assert result.filename == "nope.pdf"
    stages = [e.split(":", 1)[0] for e in result.errors]
    assert stages == ["text-layer", "rasterize", "no-text"]


def test_unexpected_error_becomes_internal_entry(tmp_path: Path, settings: ExtractionSettings) -> None:
    def broken(path: Path) -> str:
        raise RuntimeError("disk on fire")

    result = extract(tmp_path / "x.pdf", settings=settings, text_layer=broken)
    assert result.success is False
    assert result.errors == ["internal: disk on fire"]


def test_result_envelope_fields(tmp_path: Path, settings: ExtractionSettings) -> None:
    result = extract(
        tmp_path / "week.pdf",
        ExtractOptions(user_id="u1", preview_mode=True),
        settings=settings,
        text_layer=lambda p: LONG_REPORT,
    )
    assert result.id.startswith("ext_")
    assert result.filename == "week.pdf"
    assert result.timestamp.endswith("+00:00")
    dumped = result.model_dump()
    assert set(dumped) == {"id", "filename", "timestamp", "success", "data", "errors"}
    assert set(dumped["data"]) == {"raw_text", "ocr_text", "workouts", "metrics", "dates", "summary"}
    assert all(m["timestamp"] == result.timestamp for m in dumped["data"]["metrics"])


def test_extract_from_text_metrics_only() -> None:
    data = extract_from_text("IMC: 23.5\nPoids: 74.2 kg")
    assert [(m.type, m.value, m.unit) for m in data.metrics] == [("bmi", 23.5, None), ("weight", 74.2, "kg")]
    assert data.workouts == []
    assert data.summary.total_metrics == 2
    assert data.summary.metric_types == ["bmi", "weight"]
    assert data.summary.date_range is None


def test_extract_from_text_is_deterministic_apart_from_ids() -> None:
    ts = "2026-01-01T00:00:00+00:00"
    a = extract_from_text(LONG_REPORT, timestamp=ts).model_dump()
    b = extract_from_text(LONG_REPORT, timestamp=ts).model_dump()
    for d in (a, b):
        for w in d["workouts"]:
            w.pop("id")
            for ex in w["exercises"]:
                ex.pop("id")
        for m in d["metrics"]:
            m.pop("id")
    assert a == b


def test_ocr_environment_failure_keeps_text_layer_content(tmp_path: Path) -> None:
    settings = ExtractionSettings(ocr_dpi=72, temp_dir=str(tmp_path / "missing"))
    pdf = _blank_pdf(tmp_path / "scan.pdf", 1)
    result = extract(
        pdf,
        settings=settings,
        text_layer=lambda p: "12/03/2024 musculation\ncalories: 300",
        recognizer=lambda p, lang: "",
    )
    assert result.success
    assert len(result.errors) == 1
    assert result.errors[0].startswith("ocr: ")
    assert [(w.type, w.date, w.calories) for w in result.data.workouts] == [("strength", "2024-03-12", 300)]


def test_run_ocr_wraps_unexpected_errors(tmp_path: Path, settings: ExtractionSettings, monkeypatch: pytest.MonkeyPatch) -> None:
    pdf = _blank_pdf(tmp_path / "scan.pdf", 1)

    def disk_full(pages, **kwargs):
        raise OSError("No space left on device")

    monkeypatch.setattr("fitextract.extract.recognize_pages", disk_full)
    with pytest.raises(ExtractionError) as exc_info:
        run_ocr(pdf, settings)
    assert exc_info.value.stage == "ocr"
    assert "No space left on device" in exc_info.value.message
    assert list(Path(settings.temp_dir).iterdir()) == []
