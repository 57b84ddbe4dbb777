from datetime import datetime
import enum

from sqlalchemy import (
    JSON,
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from app.dependencies.database import Base


class EducationStage(enum.Enum):
    PRIMARY = "primary"
    MIDDLE = "middle"
    SECONDARY = "secondary"


class GradeLevel(enum.Enum):
    PRIMARY_FIRST = "primary_first"
    PRIMARY_SECOND = "primary_second"
    PRIMARY_THIRD = "primary_third"
    PRIMARY_FOURTH = "primary_fourth"
    PRIMARY_FIFTH = "primary_fifth"
    PRIMARY_SIXTH = "primary_sixth"
    MIDDLE_FIRST = "middle_first"
    MIDDLE_SECOND = "middle_second"
    MIDDLE_THIRD = "middle_third"
    SECONDARY_FIRST = "secondary_first"
    SECONDARY_SECOND = "secondary_second"
    SECONDARY_THIRD = "secondary_third"

    @property
    def stage(self) -> EducationStage:
        return EducationStage(self.value.split("_", 1)[0])


class GradeBand(enum.Enum):
    EXCELLENT = "Excellent"
    VERY_GOOD = "Very Good"
    GOOD = "Good"
    ACCEPTABLE = "Acceptable"
    WEAK = "Weak"


class BehaviorCategory(enum.Enum):
    BEHAVIOR = "behavior"
    DISTURBANCE = "disturbance"
    COOPERATION = "cooperation"
    CLEANLINESS = "cleanliness"


class NoteType(enum.Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    GENERAL = "general"


DEFAULT_SUBJECT = "default"


class Student(Base):
    __tablename__ = "students"
    __table_args__ = (Index("ix_students_cohort", "grade", "subject", "section_number"),)
    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    grade = Column(Enum(GradeLevel), nullable=False)
    subject = Column(String(255), nullable=False, default=DEFAULT_SUBJECT)
    section_number = Column(Integer, nullable=False, default=1)
    attendance = Column(JSON, nullable=True)
    performance_tasks = Column(Integer, nullable=False, default=0)
    participation = Column(Integer, nullable=False, default=0)
    book = Column(Integer, nullable=False, default=0)
    homework = Column(Integer, nullable=False, default=0)
    exam1 = Column(Integer, nullable=False, default=0)
    exam2 = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    behavior_records = relationship("BehaviorRecord", back_populates="student", cascade="all, delete-orphan")
    notes = relationship("ClassroomNote", back_populates="student", cascade="all, delete-orphan")
    follow_ups = relationship("DailyFollowUp", back_populates="student", cascade="all, delete-orphan")
    groups = relationship("ClassroomGroup", secondary="classroom_group_members", back_populates="members")


class GradeSetting(Base):
    __tablename__ = "grade_settings"
    id = Column(Integer, primary_key=True)
    grade = Column(Enum(GradeLevel), unique=True, nullable=False, index=True)
    performance_tasks_max = Column(Integer, nullable=False, default=10)
    exam1_max = Column(Integer, nullable=False, default=30)
    exam2_max = Column(Integer, nullable=False, default=30)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class BehaviorRecord(Base):
    __tablename__ = "behavior_records"
    __table_args__ = (UniqueConstraint("student_id", "category", name="uq_behavior_student_category"),)
    id = Column(Integer, primary_key=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    category = Column(Enum(BehaviorCategory), nullable=False)
    stars = Column(JSON, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    student = relationship("Student", back_populates="behavior_records")


# Association table for many-to-many relationship between ClassroomGroup and Student
classroom_group_members = Table(
    "classroom_group_members",
    Base.metadata,
    Column("group_id", Integer, ForeignKey("classroom_groups.id", ondelete="CASCADE"), primary_key=True),
    Column("student_id", Integer, ForeignKey("students.id", ondelete="CASCADE"), primary_key=True),
    UniqueConstraint("group_id", "student_id", name="uq_group_student"),
)


class ClassroomGroup(Base):
    __tablename__ = "classroom_groups"
    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    points = Column(Integer, nullable=False, default=0)
    section_key = Column(String(255), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    members = relationship("Student", secondary="classroom_group_members", back_populates="groups")


class ClassroomNote(Base):
    __tablename__ = "classroom_notes"
    id = Column(Integer, primary_key=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    student_name = Column(String(255), nullable=False)
    text = Column(Text, nullable=False)
    note_type = Column(Enum(NoteType), nullable=False, default=NoteType.GENERAL)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    student = relationship("Student", back_populates="notes")


class DailyFollowUp(Base):
    __tablename__ = "daily_follow_ups"
    __table_args__ = (UniqueConstraint("student_id", "day", name="uq_follow_up_student_day"),)
    id = Column(Integer, primary_key=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    day = Column(Date, nullable=False, index=True)
    attendance = Column(JSON, nullable=False)
    homework = Column(JSON, nullable=False)
    participation = Column(JSON, nullable=False)
    performance_tasks = Column(String(10), nullable=False, default="none")
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    student = relationship("Student", back_populates="follow_ups")
