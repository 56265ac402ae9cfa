"""Initial schema: colleges, departments, people, supervisors, projects,
students, users and permissions.

Revision ID: v001
Revises:
Create Date: 2026-10-19 00:00:00.000000

Runs unchanged against SQLite (dev) and PostgreSQL (production).

To apply:
    cd backend/
    alembic upgrade head
"""
from __future__ import annotations
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "v001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_DOC_TYPES = ("COLLEGE", "DEPARTMENT", "PROJECT", "STUDENT", "SUPERVISOR", "USER", "PERMISSION")
_PERMISSION_TYPES = ("CREATE", "READ", "UPDATE", "DELETE")
_GENDERS = ("Male", "Female")


def _id() -> sa.Column:
    return sa.Column("id", sa.String(36), primary_key=True)


def _created_at() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), nullable=True)


def upgrade() -> None:
    # ── colleges / departments ─────────────────────────────────────────────
    op.create_table(
        "colleges",
        _id(),
        sa.Column("name", sa.String(35), nullable=False, unique=True),
        _created_at(),
    )
    op.create_table(
        "departments",
        _id(),
        sa.Column("name", sa.String(45), nullable=False),
        sa.Column("college_id", sa.String(36), sa.ForeignKey("colleges.id"), nullable=False),
        _created_at(),
        sa.UniqueConstraint("college_id", "name"),
    )
    op.create_index("ix_departments_college_id", "departments", ["college_id"])

    # ── people / supervisors ───────────────────────────────────────────────
    op.create_table(
        "people",
        _id(),
        sa.Column("full_name", sa.String(50), nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=False),
        sa.Column("college_email", sa.String(256), nullable=False, unique=True),
        sa.Column("gender", sa.Enum(*_GENDERS, name="gender"), nullable=True),
        sa.Column("department_id", sa.String(36), sa.ForeignKey("departments.id"), nullable=False),
    )
    op.create_index("ix_people_department_id", "people", ["department_id"])

    op.create_table(
        "supervisors",
        _id(),
        sa.Column("person_id", sa.String(36), sa.ForeignKey("people.id"), nullable=False, unique=True),
        _created_at(),
    )

    # ── projects / students ────────────────────────────────────────────────
    op.create_table(
        "projects",
        _id(),
        sa.Column("name", sa.String(256), nullable=False),
        sa.Column("rate", sa.Integer(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("description", sa.String(500), nullable=False),
        sa.Column("document_caption", sa.String(255), nullable=False),
        sa.Column("document_path", sa.String(64), nullable=False),
        sa.Column("department_id", sa.String(36), sa.ForeignKey("departments.id"), nullable=False),
        sa.Column("supervisor_id", sa.String(36), sa.ForeignKey("supervisors.id"), nullable=False),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_projects_name", "projects", ["name"])
    op.create_index("ix_projects_year", "projects", ["year"])
    op.create_index("ix_projects_department_id", "projects", ["department_id"])
    op.create_index("ix_projects_supervisor_id", "projects", ["supervisor_id"])

    op.create_table(
        "students",
        _id(),
        sa.Column("person_id", sa.String(36), sa.ForeignKey("people.id"), nullable=False, unique=True),
        sa.Column("personal_email", sa.String(256), nullable=False, unique=True),
        sa.Column("username", sa.String(30), nullable=False, unique=True),
        sa.Column("hashed_password", sa.Text(), nullable=False),
        sa.Column(
            "project_id",
            sa.String(36),
            sa.ForeignKey("projects.id", ondelete="SET NULL"),
            nullable=True,
        ),
        _created_at(),
    )
    op.create_index("ix_students_project_id", "students", ["project_id"])

    # ── users / permissions ────────────────────────────────────────────────
    op.create_table(
        "users",
        _id(),
        sa.Column("username", sa.String(30), nullable=False),
        sa.Column("hashed_password", sa.Text(), nullable=False),
        sa.Column("token", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("person_id", sa.String(36), sa.ForeignKey("people.id"), nullable=True, unique=True),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "permissions",
        _id(),
        sa.Column(
            "user_id",
            sa.String(36),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("doc_type", sa.Enum(*_DOC_TYPES, name="doc_type"), nullable=False),
        sa.Column(
            "permission_type",
            sa.Enum(*_PERMISSION_TYPES, name="permission_type"),
            nullable=False,
        ),
        _created_at(),
    )
    op.create_index("ix_permissions_user_id", "permissions", ["user_id"])


def downgrade() -> None:
    op.drop_table("permissions")
    op.drop_table("users")
    op.drop_table("students")
    op.drop_table("projects")
    op.drop_table("supervisors")
    op.drop_table("people")
    op.drop_table("departments")
    op.drop_table("colleges")
    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        sa.Enum(*_PERMISSION_TYPES, name="permission_type").drop(bind, checkfirst=True)
        sa.Enum(*_DOC_TYPES, name="doc_type").drop(bind, checkfirst=True)
        sa.Enum(*_GENDERS, name="gender").drop(bind, checkfirst=True)
