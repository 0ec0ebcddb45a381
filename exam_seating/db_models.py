from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Boolean, Date, DateTime, ForeignKey, JSON, Text
from sqlalchemy.orm import relationship

from exam_seating.database import Base


def utcnow():
    return datetime.now(timezone.utc)


class UserRole:
    ADMIN = "admin"
    HOD = "hod"
    FACULTY = "faculty"
    STUDENT = "student"


class PlanStatus:
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    ALL = (PENDING, APPROVED, REJECTED)
    DECISIONS = (APPROVED, REJECTED)


class DepartmentDB(Base):
    __tablename__ = "departments"

    id = Column(Integer, primary_key = True, index = True)
    name = Column(String, unique = True, nullable = False)
    code = Column(String, unique = True, nullable = False)
    is_active = Column(Boolean, nullable = False, default = True)

    sections = relationship("SectionDB", back_populates = "department")


class SectionDB(Base):
    __tablename__ = "sections"

    id = Column(Integer, primary_key = True, index = True)
    name = Column(String, nullable = False)
    semester = Column(Integer, nullable = False, default = 1)
    department_id = Column(Integer, ForeignKey("departments.id"), nullable = False)
    is_active = Column(Boolean, nullable = False, default = True)

    department = relationship("DepartmentDB", back_populates = "sections")


class UserDB(Base):
    """Users are owned by the ERP user service, seating only reads them"""
    __tablename__ = "users"

    id = Column(Integer, primary_key = True, index = True)
    name = Column(String, nullable = False)
    email = Column(String, unique = True, nullable = False)
    role = Column(String, nullable = False, index = True)
    enrollment_number = Column(String, nullable = True)
    is_active = Column(Boolean, nullable = False, default = True)

    department_id = Column(Integer, ForeignKey("departments.id"), nullable = True)
    section_id = Column(Integer, ForeignKey("sections.id"), nullable = True, index = True)

    department = relationship("DepartmentDB")
    section = relationship("SectionDB")


class SeatingPlanDB(Base):
    __tablename__ = "seating_plans"

    id = Column(Integer, primary_key = True, index = True)
    faculty_id = Column(Integer, ForeignKey("users.id"), nullable = False, index = True)
    section_id = Column(Integer, ForeignKey("sections.id"), nullable = False, index = True)
    exam_name = Column(String, nullable = False)

    # embedded rooms + seats, same shape as the generate preview:
    # [{"roomName": "R1", "rows": 1, "cols": 3, "benchCapacity": 2,
    #   "studentAssignments": [{"student": 7, "row": 1, "col": 1, ...}]}]
    room_assignments = Column(JSON, nullable = False, default = list)

    status = Column(String, nullable = False, default = PlanStatus.PENDING, index = True)
    hod_remarks = Column(Text, nullable = True)
    date = Column(Date, nullable = False)
    time = Column(String, nullable = False)

    created_at = Column(DateTime(timezone = True), nullable = False, default = utcnow)
    updated_at = Column(DateTime(timezone = True), nullable = False, default = utcnow, onupdate = utcnow)

    faculty = relationship("UserDB")
    section = relationship("SectionDB")


class NotificationDB(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key = True, index = True)
    recipient_id = Column(Integer, ForeignKey("users.id"), nullable = False, index = True)
    title = Column(String, nullable = False)
    message = Column(String, nullable = False)
    type = Column(String, nullable = False, default = "general")
    is_read = Column(Boolean, nullable = False, default = False)
    link = Column(String, nullable = True)
    created_at = Column(DateTime(timezone = True), nullable = False, default = utcnow)

    recipient = relationship("UserDB")
