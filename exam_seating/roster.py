import logging

import pandas as pd
from sqlalchemy.orm import Session

from exam_seating.db_models import UserDB, UserRole
from exam_seating.exceptions import ValidationError
from exam_seating.models import Student

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = {"id", "name"}


def _to_student(user: UserDB) -> Student:
    return Student(
        id = user.id,
        name = user.name,
        usn = user.enrollment_number or "N/A",
        section_id = user.section_id
    )


def list_active_students(db: Session, section_id: int):
    """Active students of a section, ordered by name"""
    users = (
        db.query(UserDB)
        .filter(UserDB.section_id == section_id)
        .filter(UserDB.role == UserRole.STUDENT)
        .filter(UserDB.is_active.is_(True))
        .order_by(UserDB.name, UserDB.id)
        .all()
    )
    return [_to_student(u) for u in users]


def _cell_text(value) -> str:
    # numeric columns with a blank cell come back as float64
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def read_roster_excel(file_path):
    """Read a roster workbook with ``id`` and ``name`` columns (``usn`` optional)"""
    try:
        df = pd.read_excel(file_path)
    except Exception as e:
        raise ValidationError(f"Excel read failed: {e}")

    if not REQUIRED_COLUMNS.issubset(df.columns):
        missing = REQUIRED_COLUMNS - set(df.columns)
        raise ValidationError(f"Missing columns: {sorted(missing)}")

    students = []
    skipped = 0
    for _, row in df.iterrows():
        if pd.isna(row["id"]) or pd.isna(row["name"]):
            skipped += 1
            continue

        usn = row.get("usn")
        students.append(
            Student(
                id = _cell_text(row["id"]),
                name = str(row["name"]).strip(),
                usn = "N/A" if usn is None or pd.isna(usn) else _cell_text(usn)
            )
        )

    if skipped:
        logger.warning("Skipped %d roster rows without id or name", skipped)

    return students
