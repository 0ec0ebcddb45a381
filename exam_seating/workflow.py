"""
Seating plan lifecycle: preview, submit, HOD decision, notify, delete.

A plan is created ``pending`` and decided exactly once. The decision is a
conditional UPDATE on ``status = 'pending'`` so two HODs deciding the same
plan at the same time cannot both win; the loser gets StateConflictError.
Notifications go out after the decision is committed and never undo it.
"""

import logging
import random
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from exam_seating.allocator import allocate_students
from exam_seating.config import settings
from exam_seating.db_models import PlanStatus, SeatingPlanDB, SectionDB, UserDB, UserRole, utcnow
from exam_seating.exceptions import (
    AuthorizationError,
    DependencyFailure,
    NotFoundError,
    StateConflictError,
    ValidationError,
)
from exam_seating.locator import locate
from exam_seating.notifications import NotificationSink
from exam_seating.roster import list_active_students
from exam_seating.schemas import GenerateRequest, SeatingPlanCreate, room_assignment_to_dict

logger = logging.getLogger(__name__)

NOTIFICATION_TITLE = "Seating Arrangement Released"


def get_section(db: Session, section_id: int) -> SectionDB:
    section = db.query(SectionDB).filter(SectionDB.id == section_id).first()
    if not section:
        raise NotFoundError("Section", section_id)
    return section


def get_plan(db: Session, plan_id: int) -> SeatingPlanDB:
    plan = db.query(SeatingPlanDB).filter(SeatingPlanDB.id == plan_id).first()
    if not plan:
        raise NotFoundError("Seating plan", plan_id)
    return plan


def is_owner(actor: UserDB, plan: SeatingPlanDB) -> bool:
    return plan.faculty_id == actor.id


def is_department_authority(actor: UserDB, plan: SeatingPlanDB) -> bool:
    return (
        actor.role == UserRole.HOD
        and actor.department_id is not None
        and plan.section is not None
        and plan.section.department_id == actor.department_id
    )


def generate_preview(
    db: Session,
    req: GenerateRequest,
    actor: UserDB,
    rng: Optional[random.Random] = None
) -> Dict[str, Any]:
    """Allocate the section's roster into the requested rooms without saving anything"""
    get_section(db, req.section_id)

    students = list_active_students(db, req.section_id)
    if not students:
        raise ValidationError("No active students found in this section")

    rooms = [room.to_room() for room in req.rooms]
    allocation = allocate_students(students, rooms, rng=rng)

    logger.info(
        "Generated seating preview for section %s: %d students in %d rooms",
        req.section_id, len(students), len(rooms)
    )

    return {
        "faculty": actor.id,
        "section": req.section_id,
        "examName": req.exam_name,
        "roomAssignments": [room.to_dict() for room in allocation],
        "date": req.date.isoformat(),
        "time": req.time,
    }


def _check_plan_shape(payload: SeatingPlanCreate):
    seated = set()
    for room in payload.room_assignments:
        seats = set()
        for seat in room.student_assignments:
            key = (seat.row, seat.col, seat.seat_position)
            if key in seats:
                raise ValidationError(
                    f"Seat {key} is assigned twice in room '{room.room_name}'",
                    details={"room": room.room_name, "seat": list(key)}
                )
            seats.add(key)

            if seat.student is None:
                continue
            if seat.student in seated:
                raise ValidationError(
                    f"Student {seat.student} is seated more than once",
                    details={"student": seat.student}
                )
            seated.add(seat.student)


def submit_plan(db: Session, payload: SeatingPlanCreate, actor: UserDB) -> SeatingPlanDB:
    get_section(db, payload.section)
    _check_plan_shape(payload)

    plan = SeatingPlanDB(
        faculty_id=actor.id,
        section_id=payload.section,
        exam_name=payload.exam_name.strip(),
        room_assignments=[room_assignment_to_dict(r) for r in payload.room_assignments],
        status=PlanStatus.PENDING,
        date=payload.date,
        time=payload.time,
    )
    db.add(plan)
    db.commit()
    db.refresh(plan)

    logger.info("Seating plan %s submitted by user %s for section %s", plan.id, actor.id, plan.section_id)
    return plan


def _fan_out(db: Session, plan: SeatingPlanDB, sink: NotificationSink, message: str) -> int:
    students = list_active_students(db, plan.section_id)
    return sink.enqueue_many(
        [s.id for s in students],
        NOTIFICATION_TITLE,
        message,
        type="seating",
        link=settings.SEATING_LINK,
    )


def decide_plan(
    db: Session,
    plan_id: int,
    decision: str,
    remarks: Optional[str],
    actor: UserDB,
    sink: NotificationSink
) -> Dict[str, Any]:
    """Approve or reject a pending plan.

    Returns ``{"plan", "notified", "notification_error"}``. A failed fan-out
    is reported there, the decision stays committed.
    """
    if decision not in PlanStatus.DECISIONS:
        raise ValidationError(
            f"Invalid status '{decision}', expected one of {list(PlanStatus.DECISIONS)}",
            details={"status": decision}
        )

    plan = get_plan(db, plan_id)
    if not is_department_authority(actor, plan):
        raise AuthorizationError("Not authorized to review seating plans outside your department")

    updated = (
        db.query(SeatingPlanDB)
        .filter(SeatingPlanDB.id == plan_id)
        .filter(SeatingPlanDB.status == PlanStatus.PENDING)
        .update(
            {
                SeatingPlanDB.status: decision,
                SeatingPlanDB.hod_remarks: remarks,
                SeatingPlanDB.updated_at: utcnow(),
            },
            synchronize_session=False
        )
    )
    db.commit()

    if not updated:
        current = db.query(SeatingPlanDB.status).filter(SeatingPlanDB.id == plan_id).scalar()
        if current is None:
            raise NotFoundError("Seating plan", plan_id)
        logger.warning("Seating plan %s already %s, decision '%s' by user %s refused",
                       plan_id, current, decision, actor.id)
        raise StateConflictError(plan_id, current)

    db.refresh(plan)
    logger.info("Seating plan %s %s by user %s", plan.id, decision, actor.id)

    result = {"plan": plan, "notified": 0, "notification_error": None}
    if decision == PlanStatus.APPROVED:
        try:
            result["notified"] = _fan_out(
                db, plan, sink, f"Seating plan for {plan.exam_name} is now available."
            )
        except DependencyFailure as e:
            logger.error("Seating plan %s approved but notifications failed: %s", plan.id, e)
            result["notification_error"] = e.message

    return result


def notify_plan(db: Session, plan_id: int, actor: UserDB, sink: NotificationSink) -> int:
    """Send the seating notification again; any status, duplicates are fine"""
    plan = get_plan(db, plan_id)
    if not (is_owner(actor, plan) or is_department_authority(actor, plan)):
        raise AuthorizationError("Not authorized to notify students for this plan")

    count = _fan_out(
        db, plan, sink, f"Seating plan for {plan.exam_name} ({plan.time}) is now available."
    )
    logger.info("Re-sent seating plan %s notification to %d students", plan.id, count)
    return count


def delete_plan(db: Session, plan_id: int, actor: UserDB):
    plan = get_plan(db, plan_id)
    if not is_owner(actor, plan):
        raise AuthorizationError("Not authorized to delete this plan")

    db.delete(plan)
    db.commit()
    logger.info("Seating plan %s deleted by user %s", plan_id, actor.id)


def list_pending(db: Session, actor: UserDB) -> List[SeatingPlanDB]:
    if actor.department_id is None:
        return []
    return (
        db.query(SeatingPlanDB)
        .join(SectionDB, SeatingPlanDB.section_id == SectionDB.id)
        .filter(SeatingPlanDB.status == PlanStatus.PENDING)
        .filter(SectionDB.department_id == actor.department_id)
        .order_by(SeatingPlanDB.created_at.desc(), SeatingPlanDB.id.desc())
        .all()
    )


def list_history(db: Session, actor: UserDB) -> List[SeatingPlanDB]:
    return (
        db.query(SeatingPlanDB)
        .filter(SeatingPlanDB.faculty_id == actor.id)
        .order_by(SeatingPlanDB.created_at.desc(), SeatingPlanDB.id.desc())
        .all()
    )


def my_seating(db: Session, actor: UserDB) -> List[Dict[str, Any]]:
    """Seats of a student across the approved plans of their section, latest exam first"""
    if actor.section_id is None:
        return []

    plans = (
        db.query(SeatingPlanDB)
        .filter(SeatingPlanDB.section_id == actor.section_id)
        .filter(SeatingPlanDB.status == PlanStatus.APPROVED)
        .order_by(SeatingPlanDB.date.desc(), SeatingPlanDB.created_at.desc())
        .all()
    )
    details = locate(plans, actor.id)
    for entry in details:
        entry["date"] = entry["date"].isoformat() if entry["date"] else None
    return details
