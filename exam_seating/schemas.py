import datetime as dt
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from exam_seating.config import settings
from exam_seating.models import RoomSpec


class CamelModel(BaseModel):
    """Accepts both camelCase (what the web client sends) and snake_case"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)


class RoomSpecIn(CamelModel):
    name: str = Field(..., min_length=1)
    rows: int = Field(..., ge=1)
    cols: int = Field(..., ge=1)
    bench_capacity: int = Field(default_factory=lambda: settings.DEFAULT_BENCH_CAPACITY, ge=1)

    def to_room(self) -> RoomSpec:
        return RoomSpec(self.name, self.rows, self.cols, self.bench_capacity)


class GenerateRequest(CamelModel):
    """
    Example request body:
    {
      "sectionId": 3,
      "examName": "Mid Term - DBMS",
      "rooms": [{"name": "B201", "rows": 5, "cols": 4, "benchCapacity": 2}],
      "date": "2026-11-02",
      "time": "10:00 AM - 1:00 PM"
    }
    """
    section_id: int
    exam_name: str = Field(..., min_length=1)
    rooms: List[RoomSpecIn] = Field(default_factory=list)
    date: dt.date
    time: str = Field(..., min_length=1)


class SeatAssignmentIn(CamelModel):
    student: Optional[int] = None
    name: str = ""
    usn: str = "N/A"
    row: int = Field(..., ge=1)
    col: int = Field(..., ge=1)
    bench: Optional[int] = None
    seat_position: int = Field(..., ge=1)


class RoomAssignmentIn(CamelModel):
    room_name: str = Field(..., min_length=1)
    rows: int = Field(..., ge=1)
    cols: int = Field(..., ge=1)
    bench_capacity: int = Field(default_factory=lambda: settings.DEFAULT_BENCH_CAPACITY, ge=1)
    student_assignments: List[SeatAssignmentIn] = Field(default_factory=list)

    @model_validator(mode="after")
    def seats_inside_room(self):
        for seat in self.student_assignments:
            if seat.row > self.rows or seat.col > self.cols or seat.seat_position > self.bench_capacity:
                raise ValueError(
                    f"Seat ({seat.row}, {seat.col}, {seat.seat_position}) is outside room '{self.room_name}'"
                )
        return self


class SeatingPlanCreate(CamelModel):
    """The preview returned by /generate, sent back unchanged for approval"""
    section: int
    exam_name: str = Field(..., min_length=1)
    room_assignments: List[RoomAssignmentIn] = Field(default_factory=list)
    date: dt.date
    time: str = Field(..., min_length=1)


class StatusUpdate(CamelModel):
    status: str
    hod_remarks: Optional[str] = None


def room_assignment_to_dict(room: RoomAssignmentIn) -> Dict[str, Any]:
    return {
        "roomName": room.room_name,
        "rows": room.rows,
        "cols": room.cols,
        "benchCapacity": room.bench_capacity,
        "studentAssignments": [
            {
                "student": seat.student,
                "name": seat.name,
                "usn": seat.usn,
                "row": seat.row,
                "col": seat.col,
                "bench": seat.bench if seat.bench is not None else seat.col,
                "seatPosition": seat.seat_position,
            }
            for seat in room.student_assignments
        ],
    }


def plan_to_dict(plan) -> Dict[str, Any]:
    return {
        "id": plan.id,
        "faculty": plan.faculty_id,
        "facultyName": plan.faculty.name if plan.faculty else None,
        "section": plan.section_id,
        "sectionName": plan.section.name if plan.section else None,
        "examName": plan.exam_name,
        "roomAssignments": plan.room_assignments,
        "status": plan.status,
        "hodRemarks": plan.hod_remarks,
        "date": plan.date.isoformat() if plan.date else None,
        "time": plan.time,
        "createdAt": plan.created_at.isoformat() if plan.created_at else None,
        "updatedAt": plan.updated_at.isoformat() if plan.updated_at else None,
    }


def notification_to_dict(n) -> Dict[str, Any]:
    return {
        "id": n.id,
        "recipient": n.recipient_id,
        "title": n.title,
        "message": n.message,
        "type": n.type,
        "isRead": n.is_read,
        "link": n.link,
        "createdAt": n.created_at.isoformat() if n.created_at else None,
    }
