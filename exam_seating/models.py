from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from exam_seating.exceptions import ValidationError


@dataclass
class Student:
    id: Any
    name: str
    usn: str = "N/A"
    section_id: Optional[int] = None


@dataclass
class RoomSpec:
    name: str
    rows: int
    cols: int
    bench_capacity: int = 2

    @property
    def capacity(self) -> int:
        return self.rows * self.cols * self.bench_capacity

    def validate(self):
        if not self.name or not str(self.name).strip():
            raise ValidationError("Room name is required")
        for attr in ("rows", "cols", "bench_capacity"):
            value = getattr(self, attr)
            if not isinstance(value, int) or value < 1:
                raise ValidationError(
                    f"Room '{self.name}': {attr} must be a positive integer",
                    details={"room": self.name, "field": attr, "value": value}
                )


@dataclass
class SeatAssignment:
    student: Any
    name: str
    usn: str
    row: int
    col: int
    bench: int
    seat_position: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "student": self.student,
            "name": self.name,
            "usn": self.usn,
            "row": self.row,
            "col": self.col,
            "bench": self.bench,
            "seatPosition": self.seat_position,
        }


@dataclass
class RoomAssignment:
    room_name: str
    rows: int
    cols: int
    bench_capacity: int
    student_assignments: List[SeatAssignment] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "roomName": self.room_name,
            "rows": self.rows,
            "cols": self.cols,
            "benchCapacity": self.bench_capacity,
            "studentAssignments": [a.to_dict() for a in self.student_assignments],
        }
