import logging
import random
from collections import deque
from typing import List, Optional, Sequence

from exam_seating.exceptions import CapacityExceededError
from exam_seating.layouts import generate_slots, total_capacity
from exam_seating.models import RoomAssignment, RoomSpec, SeatAssignment, Student

logger = logging.getLogger(__name__)


def allocate_students(
    students: Sequence[Student],
    rooms: Sequence[RoomSpec],
    rng: Optional[random.Random] = None
) -> List[RoomAssignment]:
    """Shuffle the roster and pack it into the rooms in the order given.

    The caller's roster is left untouched. Raises CapacityExceededError when
    students are left over after the last room; nothing is returned then.
    """
    for room in rooms:
        room.validate()

    rng = rng or random.Random()
    shuffled = list(students)
    rng.shuffle(shuffled)
    pool = deque(shuffled)

    allocation = []
    for room in rooms:
        assignment = RoomAssignment(
            room_name=room.name,
            rows=room.rows,
            cols=room.cols,
            bench_capacity=room.bench_capacity
        )

        for row, col, seat_position in generate_slots(room):
            if not pool:
                break

            student = pool.popleft()
            assignment.student_assignments.append(
                SeatAssignment(
                    student=student.id,
                    name=student.name,
                    usn=student.usn or "N/A",
                    row=row,
                    col=col,
                    # one bench per column in this layout
                    bench=col,
                    seat_position=seat_position
                )
            )

        allocation.append(assignment)

    if pool:
        logger.info(
            "Allocation failed: %d of %d students unseated across %d rooms (capacity %d)",
            len(pool), len(shuffled), len(rooms), total_capacity(rooms)
        )
        raise CapacityExceededError(len(pool))

    return allocation
