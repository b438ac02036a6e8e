import csv
import io
from datetime import datetime, timezone

import pytest

from nextplay.errors import BadRequest
from nextplay.services import reports
from nextplay.timelines import progress_percentage, suggested_timeline


def test_csv_cells_are_quoted_and_escaped():
    injury = {
        "type": 'Knee "tweak"',
        "description": "fell, twice",
        "date": datetime(2025, 3, 4, tzinfo=timezone.utc),
        "location": "knee",
        "severity": "moderate",
        "recoveryStatus": "Light Activity",
        "photos": ["https://x/1.png", "https://x/2.png"],
    }
    text = reports.child_history_csv({"name": "Sam", "age": 10}, [injury]).decode("utf-8")
    lines = text.lstrip("\ufeff").splitlines()
    header_at = next(i for i, l in enumerate(lines) if l.startswith('"Injury Type"'))
    rows = list(csv.reader(io.StringIO("\n".join(lines[header_at:]))))
    assert rows[1][:7] == ['Knee "tweak"', "fell, twice", "03/04/2025", "knee", "moderate", "Light Activity", "66%"]
    assert rows[1][8] == "https://x/1.png; https://x/2.png"


def test_empty_exports_still_render():
    assert "Total Children: 0" in reports.children_csv([]).decode("utf-8")
    assert reports.injuries_pdf([]).startswith(b"%PDF")


def test_export_filename_is_safe():
    name = reports.export_filename("Sam O'Neil/history", "csv")
    assert name.startswith("Sam_O_Neil_history-")
    assert name.endswith(".csv")


def test_check_format():
    assert reports.check_format("PDF") == "pdf"
    with pytest.raises(BadRequest):
        reports.check_format("xml")
    with pytest.raises(BadRequest):
        reports.check_format(None)


def test_timeline_lookup_is_fuzzy():
    assert suggested_timeline("Mild ankle sprain").suggested_days == 14
    assert suggested_timeline("meniscus").suggested_days == 90
    assert suggested_timeline("").suggested_days == 21


def test_progress_percentage():
    assert [progress_percentage(s) for s in ("Resting", "Light Activity", "Full Play", None)] == [33, 66, 100, 0]
