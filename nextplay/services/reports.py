# nextplay/services/reports.py
"""
CSV and PDF reports for children and injuries.

Inputs are plain Mongo documents with references already expanded
(child.parent, injury.child, injury.parent). Nothing here checks access;
routes call the authorization layer first.
"""
from __future__ import annotations

import csv
import io
import re
from xml.sax.saxutils import escape
from datetime import date, datetime, timezone
from typing import Iterable, List, Optional

from fastapi.responses import StreamingResponse
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from nextplay.errors import BadRequest
from nextplay.timelines import FULL_PLAY, RESTING, progress_percentage
from nextplay.utils.serialize import ensure_aware_utc

FORMATS = ("csv", "pdf")
MEDIA_TYPES = {"csv": "text/csv; charset=utf-8", "pdf": "application/pdf"}
FOOTER = "Next Play Recovery - Youth Sports Injury Tracking System"
BRAND_BLUE = colors.HexColor("#2563eb")


# ----------------- formatting helpers -----------------
def _today() -> date:
    return datetime.now(timezone.utc).date()


def _short_date(value) -> str:
    if isinstance(value, datetime):
        return ensure_aware_utc(value).strftime("%m/%d/%Y")
    return str(value or "")


def _long_date(d: date) -> str:
    return d.strftime("%B %d, %Y")


def _photos(injury: dict) -> List[str]:
    return list(injury.get("photos") or [])


def _named(ref, key: str) -> str:
    return ref.get(key) or "" if isinstance(ref, dict) else ""


def export_filename(subject: str, ext: str) -> str:
    safe = re.sub(r"[^a-zA-Z0-9-]", "_", subject)
    return f"{safe}-{_today().isoformat()}.{ext}"


def _csv_document(preamble: Iterable[str], headers: List[str], rows: Iterable[list]) -> bytes:
    """UTF-8 with BOM for Excel, title/summary lines, then fully-quoted rows."""
    buf = io.StringIO()
    buf.write("\ufeff")
    for line in preamble:
        if line:
            buf.write(line + "\n")
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(headers)
    for row in rows:
        writer.writerow(["" if c is None else str(c) for c in row])
    return buf.getvalue().encode("utf-8")


def _injury_line(injury: dict) -> str:
    return (
        f"{injury.get('type', '')} ({_short_date(injury.get('date'))}) - "
        f"{injury.get('severity', '')} - {injury.get('recoveryStatus', '')}"
    )


# ----------------- CSV -----------------
def children_csv(children: List[dict]) -> bytes:
    headers = ["Name", "Age", "Gender", "Sport", "Parent Name", "Parent Email",
               "Injuries Count", "Injury Details", "Photo Links", "Created Date"]
    rows = []
    for child in children:
        injuries = child.get("injuries") or []
        rows.append([
            child.get("name", ""),
            child.get("age", ""),
            child.get("gender", ""),
            child.get("sport", ""),
            _named(child.get("parent"), "name"),
            _named(child.get("parent"), "email"),
            len(injuries),
            "; ".join(_injury_line(i) for i in injuries) or "No injuries",
            "; ".join(", ".join(_photos(i)) or "No photos" for i in injuries) or "No photos",
            _short_date(child.get("createdAt")),
        ])
    preamble = [
        "Children Export Report",
        f"Export Date: {_long_date(_today())}",
        f"Total Children: {len(children)}",
    ]
    return _csv_document(preamble, headers, rows)


_INJURY_HEADERS = ["Injury Type", "Description", "Date", "Location", "Severity",
                   "Recovery Status", "Progress %"]
_INJURY_TAIL_HEADERS = ["Photos Count", "Photo Links", "Notes",
                        "Suggested Timeline (Days)", "Created Date", "Last Updated"]


def _injury_head(injury: dict) -> list:
    return [
        injury.get("type", ""),
        injury.get("description", ""),
        _short_date(injury.get("date")),
        injury.get("location", ""),
        injury.get("severity", ""),
        injury.get("recoveryStatus", ""),
        f"{progress_percentage(injury.get('recoveryStatus'))}%",
    ]


def _injury_tail(injury: dict) -> list:
    photos = _photos(injury)
    return [
        len(photos),
        "; ".join(photos) or "No photos",
        injury.get("notes", ""),
        injury.get("suggestedTimeline") or 0,
        _short_date(injury.get("createdAt")),
        _short_date(injury.get("updatedAt")),
    ]


def injuries_csv(injuries: List[dict]) -> bytes:
    headers = (_INJURY_HEADERS
               + ["Child Name", "Child Age", "Child Gender", "Child Sport", "Parent Name", "Parent Email"]
               + _INJURY_TAIL_HEADERS)
    rows = []
    for injury in injuries:
        child = injury.get("child") if isinstance(injury.get("child"), dict) else {}
        parent = injury.get("parent") if isinstance(injury.get("parent"), dict) else {}
        rows.append(
            _injury_head(injury)
            + [child.get("name", "N/A"), child.get("age", "N/A"), child.get("gender", "N/A"),
               child.get("sport", "N/A"), parent.get("name", "N/A"), parent.get("email", "N/A")]
            + _injury_tail(injury)
        )
    preamble = [
        "Injuries Export Report",
        f"Export Date: {_long_date(_today())}",
        f"Total Injuries: {len(injuries)}",
    ]
    return _csv_document(preamble, headers, rows)


def child_history_csv(child: dict, injuries: List[dict]) -> bytes:
    rows = [_injury_head(i) + _injury_tail(i) for i in injuries]
    preamble = [
        "Child Injury History Report",
        f"Child Name: {child.get('name', '')}",
        f"Age: {child.get('age', '')} years old",
        f"Gender: {child['gender']}" if child.get("gender") else "",
        f"Primary Sport: {child['sport']}" if child.get("sport") else "",
        f"Export Date: {_long_date(_today())}",
        f"Total Injuries: {len(injuries)}",
    ]
    return _csv_document(preamble, _INJURY_HEADERS + _INJURY_TAIL_HEADERS, rows)


# ----------------- PDF -----------------
def _table(data: List[list], col_widths: Optional[List[float]] = None) -> Table:
    table = Table(data, colWidths=col_widths, repeatRows=1)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#f8fafc")),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.HexColor("#374151")),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 8),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#f9fafb")]),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.HexColor("#e5e7eb")),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
    ]))
    return table


def _footer(canvas, doc) -> None:
    canvas.saveState()
    canvas.setFont("Helvetica", 8)
    canvas.setFillColor(colors.HexColor("#6b7280"))
    width = doc.pagesize[0]
    canvas.drawCentredString(width / 2, 1.2 * cm, FOOTER)
    canvas.drawCentredString(width / 2, 0.8 * cm, f"Page {doc.page}")
    canvas.restoreState()


def _render_pdf(title: str, summary: List[str], section: str, table: Table) -> bytes:
    buf = io.BytesIO()
    doc = SimpleDocTemplate(
        buf, pagesize=A4, title=title, author="Next Play Recovery",
        leftMargin=1.5 * cm, rightMargin=1.5 * cm, topMargin=1.5 * cm, bottomMargin=2 * cm,
    )
    styles = getSampleStyleSheet()
    heading = styles["Heading2"]
    heading.textColor = BRAND_BLUE

    story = [
        Paragraph(escape(title), styles["Title"]),
        Paragraph(f"Generated on {_long_date(_today())}", styles["Normal"]),
        Spacer(1, 0.5 * cm),
        Paragraph("Summary", heading),
    ]
    story += [Paragraph(escape(line), styles["Normal"]) for line in summary]
    story += [Spacer(1, 0.5 * cm), Paragraph(section, heading), table]
    doc.build(story, onFirstPage=_footer, onLaterPages=_footer)
    return buf.getvalue()


def children_pdf(children: List[dict]) -> bytes:
    total_injuries = sum(len(c.get("injuries") or []) for c in children)
    with_injuries = sum(1 for c in children if c.get("injuries"))
    average = f"{total_injuries / len(children):.1f}" if children else "0"
    data = [["Name", "Age", "Gender", "Sport", "Parent", "Injuries"]]
    for c in children:
        parent = c.get("parent")
        data.append([
            c.get("name") or "N/A",
            str(c.get("age", "N/A")),
            c.get("gender") or "N/A",
            c.get("sport") or "N/A",
            f"{_named(parent, 'name')}\n{_named(parent, 'email')}".strip() or "N/A",
            str(len(c.get("injuries") or [])),
        ])
    summary = [
        f"Total Children: {len(children)}",
        f"Children with Injuries: {with_injuries}",
        f"Total Injuries: {total_injuries}",
        f"Average Injuries per Child: {average}",
    ]
    return _render_pdf("Children Export Report", summary, "Children Details", _table(data))


def injuries_pdf(injuries: List[dict]) -> bytes:
    def count(field, value):
        return sum(1 for i in injuries if i.get(field) == value)

    data = [["Type", "Date", "Location", "Severity", "Status", "Child", "Parent"]]
    for i in injuries:
        child = i.get("child") if isinstance(i.get("child"), dict) else {}
        parent = i.get("parent") if isinstance(i.get("parent"), dict) else {}
        data.append([
            i.get("type") or "N/A",
            _short_date(i.get("date")),
            i.get("location") or "N/A",
            i.get("severity") or "N/A",
            i.get("recoveryStatus") or "N/A",
            child.get("name", "N/A"),
            parent.get("email", "N/A"),
        ])
    summary = [
        f"Total Injuries: {len(injuries)}",
        f"Severe Injuries: {count('severity', 'severe')}",
        f"Moderate Injuries: {count('severity', 'moderate')}",
        f"Mild Injuries: {count('severity', 'mild')}",
        f"Currently Resting: {count('recoveryStatus', RESTING)}",
    ]
    return _render_pdf("Injuries Export Report", summary, "Injuries Details", _table(data))


def child_history_pdf(child: dict, injuries: List[dict]) -> bytes:
    data = [["Type", "Date", "Location", "Severity", "Status", "Progress", "Timeline"]]
    for i in injuries:
        data.append([
            i.get("type") or "N/A",
            _short_date(i.get("date")),
            i.get("location") or "N/A",
            i.get("severity") or "N/A",
            i.get("recoveryStatus") or "N/A",
            f"{progress_percentage(i.get('recoveryStatus'))}%",
            f"{i.get('suggestedTimeline') or 0} days",
        ])
    active = sum(1 for i in injuries if i.get("recoveryStatus") != FULL_PLAY)
    summary = [
        f"Child: {child.get('name', '')}, {child.get('age', '')} years old",
        f"Primary Sport: {child.get('sport') or 'N/A'}",
        f"Total Injuries: {len(injuries)}",
        f"Still Recovering: {active}",
    ]
    return _render_pdf(f"{child.get('name', 'Child')} - Injury History Report", summary,
                       "Injury History", _table(data))


# ----------------- responses -----------------
def check_format(fmt: Optional[str]) -> str:
    fmt = (fmt or "").strip().lower()
    if fmt not in FORMATS:
        raise BadRequest("Invalid format. Use csv or pdf")
    return fmt


def attachment(content: bytes, fmt: str, subject: str) -> StreamingResponse:
    return StreamingResponse(
        io.BytesIO(content),
        media_type=MEDIA_TYPES[fmt],
        headers={"Content-Disposition": f'attachment; filename="{export_filename(subject, fmt)}"'},
    )
