import csv
from io import StringIO, BytesIO
from datetime import datetime
from ..models import Reservation

from reportlab.lib.pagesizes import A4, landscape
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib import colors
from reportlab.lib.units import inch

EXPORT_COLUMNS = [
    "Guest", "People", "Nationality", "Passport", "Source", "Payment",
    "Phone", "Email", "Villa", "Room", "Check_in", "Check_out", "Status",
]


def _fmt(dt: datetime | None) -> str:
    return dt.strftime("%Y-%m-%d %H:%M") if dt else ""


def export_row(r: Reservation) -> list:
    room = r.room
    return [
        r.guest_name,
        r.num_guests if r.num_guests is not None else "",
        r.nationality or "",
        r.passport_number or "",
        r.source or "",
        r.payment_method or "",
        r.phone or "",
        r.email or "",
        room.villa.name if room and room.villa else "",
        room.name if room else "",
        _fmt(r.check_in),
        _fmt(r.check_out),
        r.status,
    ]


def generate_csv_report(reservations: list[Reservation]) -> str:
    """Generates a CSV export with one line per reservation."""
    output = StringIO()
    writer = csv.writer(output)
    writer.writerow(EXPORT_COLUMNS)
    for r in reservations:
        writer.writerow(export_row(r))
    return output.getvalue()


def generate_pdf_report(reservations: list[Reservation], title: str, period: str | None = None) -> bytes:
    """Generates a landscape PDF table of reservations using ReportLab."""
    buffer = BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=landscape(A4), rightMargin=0.4*inch, leftMargin=0.4*inch, topMargin=0.5*inch, bottomMargin=0.5*inch)
    styles = getSampleStyleSheet()
    elements = [Paragraph(title, styles['h1'])]
    if period:
        elements.append(Paragraph(period, styles['h2']))
    elements.append(Spacer(1, 0.25*inch))

    # Passport and email are left out to keep the table readable on paper
    pdf_columns = ["Guest", "People", "Nationality", "Source", "Payment", "Villa", "Room", "Check-in", "Check-out", "Status"]
    data = [pdf_columns]
    for r in reservations:
        row = export_row(r)
        data.append([row[0], row[1], row[2], row[4], row[5], row[8], row[9], row[10], row[11], row[12].replace("_", " ").title()])

    table = Table(data, repeatRows=1)
    table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.teal),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 8),
        ('BOTTOMPADDING', (0, 0), (-1, 0), 8),
        ('BACKGROUND', (0, 1), (-1, -1), colors.beige),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.black),
    ]))
    elements.append(table)

    doc.build(elements)
    return buffer.getvalue()
