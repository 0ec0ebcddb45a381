"""
Offline seating preview from an Excel roster.

    seating-preview students.xlsx --room B201:5:4 --room B202:5:4:3 --seed 7
"""

import argparse
import random
import sys

from exam_seating.allocator import allocate_students
from exam_seating.exceptions import SeatingError
from exam_seating.locator import seat_number
from exam_seating.models import RoomSpec
from exam_seating.roster import read_roster_excel


def parse_room(value):
    """NAME:ROWS:COLS[:BENCH_CAPACITY]"""
    parts = value.split(":")
    if len(parts) not in (3, 4):
        raise argparse.ArgumentTypeError(f"room must look like NAME:ROWS:COLS[:BENCH], got '{value}'")
    try:
        numbers = [int(p) for p in parts[1:]]
    except ValueError:
        raise argparse.ArgumentTypeError(f"rows, cols and bench capacity must be integers in '{value}'")
    return RoomSpec(parts[0], *numbers)


def build_parser():
    parser = argparse.ArgumentParser(prog="seating-preview", description="Preview an exam seating allocation")
    parser.add_argument("roster", help="Excel file with id, name and optional usn columns")
    parser.add_argument("--room", dest="rooms", action="append", type=parse_room, default=[],
                        help="room as NAME:ROWS:COLS[:BENCH_CAPACITY], repeatable")
    parser.add_argument("--seed", type=int, default=None, help="shuffle seed for a repeatable preview")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    try:
        students = read_roster_excel(args.roster)
        allocation = allocate_students(students, args.rooms, rng=random.Random(args.seed))
    except SeatingError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    print(f"\n--- Seat Allocation ({len(students)} students) ---")
    for room in allocation:
        print(f"\nRoom {room.room_name} ({room.rows}x{room.cols}, {room.bench_capacity} per bench)")
        for a in room.student_assignments:
            seat = seat_number(a.row, a.col, a.seat_position, room.rows, room.bench_capacity)
            print(f"  {a.usn:<12} {a.name:<24} Row {a.row} | Column {a.col} | Seat {seat}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
