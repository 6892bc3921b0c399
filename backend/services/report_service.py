"""
report_service.py — Symptom history PDF export using ReportLab.

Layout:
- Title, generation date and total entry count at the top of page one
- One block per log: date, severity, symptom names and wrapped notes
- A new page starts whenever the cursor passes the bottom margin
"""

from datetime import datetime, tzinfo
from io import BytesIO

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import cm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from services.streak_service import parse_timestamp, resolve_timezone

REPORT_TITLE = "HealthMate - Symptom History Report"
LEFT = 2 * cm
TOP_MARGIN = 2 * cm
BOTTOM_MARGIN = 2.7 * cm
TEXT_WIDTH = A4[0] - 2 * LEFT
LINE = 0.6 * cm


def report_filename(generated_on: datetime | None = None) -> str:
    d = generated_on or datetime.now()
    return f"healthmate-report-{d.strftime('%Y-%m-%d')}.pdf"


def _format_when(value, tz: tzinfo) -> str:
    try:
        return parse_timestamp(value).astimezone(tz).strftime("%b %d, %Y, %I:%M %p")
    except (TypeError, ValueError):
        return str(value or "")


def _draw_wrapped(c: canvas.Canvas, text: str, y: float, font: str = "Helvetica", size: int = 11) -> float:
    c.setFont(font, size)
    for line in simpleSplit(text, font, size, TEXT_WIDTH):
        c.drawString(LEFT, y, line)
        y -= LINE
    return y


def generate_history_pdf(logs: list[dict], generated_on: datetime | None = None, tz: tzinfo | None = None) -> bytes:
    """Render logs (each carrying ``symptom_names``) into a PDF document.

    Entry times and the generation date are shown in ``tz`` (DEFAULT_TIMEZONE when omitted).
    """
    tz = tz or resolve_timezone()
    generated_on = generated_on or datetime.now(tz)
    buf = BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    _, height = A4
    y = height - TOP_MARGIN

    c.setFont("Helvetica-Bold", 20)
    c.drawString(LEFT, y, REPORT_TITLE)
    y -= 1.0 * cm
    c.setFont("Helvetica", 12)
    c.drawString(LEFT, y, f"Generated on: {generated_on.strftime('%B %d, %Y')}")
    y -= 0.8 * cm
    c.drawString(LEFT, y, f"Total Entries: {len(logs)}")
    y -= 1.2 * cm

    for index, log in enumerate(logs, start=1):
        if y < BOTTOM_MARGIN:
            c.showPage()
            y = height - TOP_MARGIN

        c.setFont("Helvetica-Bold", 14)
        c.drawString(LEFT, y, f"Entry {index} - {_format_when(log.get('created_at'), tz)}")
        y -= 0.8 * cm

        c.setFont("Helvetica", 11)
        c.drawString(LEFT, y, f"Severity: {log.get('severity')}/10")
        y -= LINE

        y = _draw_wrapped(c, f"Symptoms: {', '.join(log.get('symptom_names') or [])}", y)
        if log.get("notes"):
            y = _draw_wrapped(c, f"Notes: {log['notes']}", y)

        y -= 0.8 * cm

    c.showPage()
    c.save()
    return buf.getvalue()
