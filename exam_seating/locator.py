from typing import Any, Dict, Iterable, List, Optional


def seat_number(row: int, col: int, seat_position: int, rows: int, bench_capacity: Optional[int] = None) -> int:
    """1-based seat number of a seat inside its room.

    Benches are numbered down each column first:
    bench_index = (col - 1) * rows + (row - 1). This is not the order the
    allocator fills seats in (row first), so seat numbers only follow fill
    order in single-row or single-column rooms. Kept for compatibility with
    seat numbers already printed on hall tickets.
    """
    capacity = bench_capacity or 2
    bench_index = ((col - 1) * rows) + (row - 1)
    return (bench_index * capacity) + seat_position


def find_assignment(room_assignments: Iterable[Dict[str, Any]], student_id: Any):
    """Return (room, seat) for the student's first seat in a plan, or (None, None)"""
    for room in room_assignments or []:
        for seat in room.get("studentAssignments") or []:
            if seat.get("student") is not None and str(seat["student"]) == str(student_id):
                return room, seat
    return None, None


def locate(plans: Iterable[Any], student_id: Any) -> List[Dict[str, Any]]:
    """One seating entry per plan that seats the student, in the plans' order"""
    details = []
    for plan in plans:
        room, seat = find_assignment(plan.room_assignments, student_id)
        if room is None:
            continue

        details.append({
            "planId": plan.id,
            "examName": plan.exam_name,
            "date": plan.date,
            "time": plan.time,
            "room": room.get("roomName"),
            "row": seat["row"],
            "col": seat["col"],
            "seatNumber": seat_number(
                seat["row"], seat["col"], seat["seatPosition"],
                room["rows"], room.get("benchCapacity")
            ),
        })
    return details
