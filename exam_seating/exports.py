from pathlib import Path

import pandas as pd
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from exam_seating.config import settings
from exam_seating.locator import seat_number


COLUMNS = ["room", "seat_no", "row", "column", "bench", "seat_position", "usn", "name"]


def plan_rows(plan):
    """One flat row per seated student, room by room in fill order"""
    rows = []
    for room in plan.room_assignments or []:
        for seat in room.get("studentAssignments") or []:
            rows.append({
                "room": room["roomName"],
                "seat_no": seat_number(
                    seat["row"], seat["col"], seat["seatPosition"],
                    room["rows"], room.get("benchCapacity")
                ),
                "row": seat["row"],
                "column": seat["col"],
                "bench": seat.get("bench", seat["col"]),
                "seat_position": seat["seatPosition"],
                "usn": seat.get("usn") or "N/A",
                "name": seat.get("name") or "",
            })
    return rows


def _export_dir() -> Path:
    export_dir = Path(settings.EXPORT_DIR)
    export_dir.mkdir(parents=True, exist_ok=True)
    return export_dir


def export_plan_excel(plan) -> Path:
    df = pd.DataFrame(plan_rows(plan), columns=COLUMNS)

    file_path = _export_dir() / f"seating_{plan.id}.xlsx"
    df.to_excel(file_path, index=False)
    return file_path


def export_plan_pdf(plan) -> Path:
    file_path = _export_dir() / f"seating_{plan.id}.pdf"

    c = canvas.Canvas(str(file_path), pagesize=A4)
    width, height = A4

    def header(y):
        c.setFont("Helvetica-Bold", 14)
        c.drawString(50, y, f"Seating Arrangement - {plan.exam_name}")
        y -= 18
        c.setFont("Helvetica", 10)
        c.drawString(50, y, f"Date: {plan.date}   Time: {plan.time}   Status: {plan.status}")
        y -= 25

        c.drawString(50, y, "Room")
        c.drawString(120, y, "Seat")
        c.drawString(165, y, "Row")
        c.drawString(205, y, "Col")
        c.drawString(245, y, "USN")
        c.drawString(345, y, "Name")
        y -= 8
        c.line(50, y, 550, y)
        return y - 15

    y = header(height - 50)

    for row in plan_rows(plan):
        if y < 60:
            c.showPage()
            y = header(height - 50)

        c.drawString(50, y, str(row["room"])[:12])
        c.drawString(120, y, str(row["seat_no"]))
        c.drawString(165, y, str(row["row"]))
        c.drawString(205, y, str(row["column"]))
        c.drawString(245, y, str(row["usn"])[:16])
        c.drawString(345, y, str(row["name"])[:32])
        y -= 15

    c.save()
    return file_path
