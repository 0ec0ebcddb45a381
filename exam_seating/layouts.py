from exam_seating.models import RoomSpec


def generate_slots(room: RoomSpec):
    """Yield (row, col, seat_position) for every seat in fill order.

    Row by row, column by column, then seat by seat on the bench. Seat
    numbers handed to students are derived from these coordinates, see
    ``locator.seat_number``.
    """
    for row in range(1, room.rows + 1):
        for col in range(1, room.cols + 1):
            for seat_position in range(1, room.bench_capacity + 1):
                yield row, col, seat_position


def total_capacity(rooms):
    return sum(room.capacity for room in rooms)
