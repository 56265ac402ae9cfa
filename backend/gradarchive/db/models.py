"""ORM models for the archive tables."""

from __future__ import annotations

import enum
import uuid
from datetime import date, datetime, timezone

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _uuid() -> str:
    return str(uuid.uuid4())


def _enum_column(enum_cls: type[enum.Enum], name: str) -> Enum:
    # Persist the enum *values* ("Male"), not the member names ("MALE").
    return Enum(
        enum_cls,
        name=name,
        values_callable=lambda members: [m.value for m in members],
        validate_strings=True,
    )


class DocType(str, enum.Enum):
    """Resource kinds a grant can refer to."""

    COLLEGE = "COLLEGE"
    DEPARTMENT = "DEPARTMENT"
    PROJECT = "PROJECT"
    STUDENT = "STUDENT"
    SUPERVISOR = "SUPERVISOR"
    USER = "USER"
    PERMISSION = "PERMISSION"


class PermissionType(str, enum.Enum):
    """Actions a grant can allow."""

    CREATE = "CREATE"
    READ = "READ"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class Gender(str, enum.Enum):
    MALE = "Male"
    FEMALE = "Female"


class Base(DeclarativeBase):
    pass


# ── Colleges & departments ─────────────────────────────────────


class College(Base):
    __tablename__ = "colleges"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(35), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    departments: Mapped[list[Department]] = relationship(
        back_populates="college", order_by="Department.name", passive_deletes="all"
    )


class Department(Base):
    __tablename__ = "departments"
    __table_args__ = (UniqueConstraint("college_id", "name"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(45), nullable=False)
    college_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("colleges.id"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    college: Mapped[College] = relationship(back_populates="departments")


# ── People ─────────────────────────────────────────────────────


class Person(Base):
    __tablename__ = "people"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    full_name: Mapped[str] = mapped_column(String(50), nullable=False)
    date_of_birth: Mapped[date] = mapped_column(Date, nullable=False)
    college_email: Mapped[str] = mapped_column(String(256), nullable=False, unique=True)
    gender: Mapped[Gender] = mapped_column(_enum_column(Gender, "gender"), default=Gender.MALE)
    department_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("departments.id"), nullable=False, index=True
    )

    department: Mapped[Department] = relationship()


class Supervisor(Base):
    __tablename__ = "supervisors"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    person_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("people.id"), nullable=False, unique=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    person: Mapped[Person] = relationship(cascade="all, delete-orphan", single_parent=True)
    projects: Mapped[list[Project]] = relationship(
        back_populates="supervisor", order_by="Project.name", passive_deletes="all"
    )


class Student(Base):
    __tablename__ = "students"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    person_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("people.id"), nullable=False, unique=True
    )
    personal_email: Mapped[str] = mapped_column(String(256), nullable=False, unique=True)
    username: Mapped[str] = mapped_column(String(30), nullable=False, unique=True)
    hashed_password: Mapped[str] = mapped_column(Text, nullable=False)
    project_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("projects.id", ondelete="SET NULL"), nullable=True, index=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    person: Mapped[Person] = relationship(cascade="all, delete-orphan", single_parent=True)
    project: Mapped[Project | None] = relationship(back_populates="students")


# ── Projects ───────────────────────────────────────────────────


class Project(Base):
    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(256), nullable=False, index=True)
    rate: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    year: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    description: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    document_caption: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    # Object key (without the ".pdf" suffix) of the stored document.
    document_path: Mapped[str] = mapped_column(String(64), nullable=False, default=_uuid)
    department_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("departments.id"), nullable=False, index=True
    )
    supervisor_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("supervisors.id"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    department: Mapped[Department] = relationship()
    supervisor: Mapped[Supervisor] = relationship(back_populates="projects")
    students: Mapped[list[Student]] = relationship(
        back_populates="project", order_by="Student.username", passive_deletes=True
    )


# ── Users & grants ─────────────────────────────────────────────


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    username: Mapped[str] = mapped_column(String(30), nullable=False, unique=True, index=True)
    hashed_password: Mapped[str] = mapped_column(Text, nullable=False)
    token: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    person_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("people.id"), nullable=True, unique=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    person: Mapped[Person | None] = relationship(cascade="all, delete-orphan", single_parent=True)
    permissions: Mapped[list[Permission]] = relationship(
        back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )


class Permission(Base):
    """A stored grant: (user, doc_type, permission_type).  Not unique."""

    __tablename__ = "permissions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    doc_type: Mapped[DocType] = mapped_column(_enum_column(DocType, "doc_type"), nullable=False)
    permission_type: Mapped[PermissionType] = mapped_column(
        _enum_column(PermissionType, "permission_type"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    user: Mapped[User] = relationship(back_populates="permissions")
