"""create schedule validation schema

Revision ID: 20261019_0001
Revises: None
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


course_kind_enum = sa.Enum("block", "non_block", name="course_kind")
academic_term_enum = sa.Enum("regular", "makeup", name="academic_term")
csr_category_enum = sa.Enum("reguler", "responsi", name="csr_category")
non_block_row_type_enum = sa.Enum("materi", "agenda", name="non_block_row_type")

SCHEDULE_TABLES = (
    "lecture_sessions",
    "pbl_sessions",
    "csr_sessions",
    "journal_reading_sessions",
    "practicum_sessions",
    "special_agenda_sessions",
    "non_block_sessions",
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def _member_table(name: str) -> None:
    op.create_table(
        name,
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("group_id", sa.String(length=36), nullable=False),
        sa.Column("student_id", sa.String(length=36), nullable=False),
        sa.UniqueConstraint("group_id", "student_id", name=f"uq_{name}_group_student"),
    )
    op.create_index(f"ix_{name}_group_id", name, ["group_id"])
    op.create_index(f"ix_{name}_student_id", name, ["student_id"])


def _schedule_table(name: str, *extra: sa.Column) -> None:
    op.create_table(
        name,
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("course_code", sa.String(length=50), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("session_count", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("room_id", sa.String(length=36), nullable=True),
        sa.Column("uses_room", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("lecturer_ids", sa.JSON(), nullable=False),
        sa.Column("small_group_id", sa.String(length=36), nullable=True),
        sa.Column("large_group_id", sa.String(length=36), nullable=True),
        sa.Column("makeup_group_id", sa.String(length=36), nullable=True),
        sa.Column("topic", sa.Text(), nullable=True),
        *extra,
        *_timestamps(),
    )
    op.create_index(f"ix_{name}_course_code", name, ["course_code"])
    op.create_index(f"ix_{name}_date", name, ["date"])
    op.create_index(f"ix_{name}_room_id", name, ["room_id"])


def upgrade() -> None:
    op.create_table(
        "rooms",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("building", sa.String(length=200), nullable=False, server_default=""),
        sa.Column("capacity", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_index("ix_rooms_name", "rooms", ["name"], unique=True)

    op.create_table(
        "lecturers",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("employee_number", sa.String(length=50), nullable=True),
        sa.Column("expertise", sa.JSON(), nullable=False),
        sa.Column("pbl_assignment_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("csr_assignment_count", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_index("ix_lecturers_employee_number", "lecturers", ["employee_number"], unique=True)

    op.create_table(
        "students",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("nim", sa.String(length=30), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("semester", sa.Integer(), nullable=True),
        sa.Column("is_veteran", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_students_nim", "students", ["nim"], unique=True)
    op.create_index("ix_students_semester", "students", ["semester"])

    op.create_table(
        "small_groups",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("semester", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("semester", "name", name="uq_small_groups_semester_name"),
    )
    op.create_index("ix_small_groups_semester", "small_groups", ["semester"])
    _member_table("small_group_members")

    op.create_table(
        "large_groups",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("semester", sa.Integer(), nullable=False, unique=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    _member_table("large_group_members")

    op.create_table(
        "makeup_groups",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("course_code", sa.String(length=50), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_makeup_groups_course_code", "makeup_groups", ["course_code"])
    _member_table("makeup_group_members")

    op.create_table(
        "course_offerings",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("code", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("kind", course_kind_enum, nullable=False),
        sa.Column("term", academic_term_enum, nullable=False, server_default="regular"),
        sa.Column("semester", sa.Integer(), nullable=True),
        sa.Column("block_number", sa.Integer(), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("required_expertise_tags", sa.JSON(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_course_offerings_code", "course_offerings", ["code"], unique=True)

    _schedule_table("lecture_sessions")
    _schedule_table("pbl_sessions", sa.Column("pbl_type", sa.String(length=20), nullable=True))
    _schedule_table(
        "csr_sessions",
        sa.Column("category", csr_category_enum, nullable=False, server_default="reguler"),
    )
    _schedule_table("journal_reading_sessions")
    _schedule_table("practicum_sessions")
    _schedule_table("special_agenda_sessions", sa.Column("agenda", sa.String(length=200), nullable=True))
    _schedule_table(
        "non_block_sessions",
        sa.Column("row_type", non_block_row_type_enum, nullable=False, server_default="materi"),
    )

    op.create_table(
        "pbl_assignments",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("course_code", sa.String(length=50), nullable=False),
        sa.Column("module_number", sa.Integer(), nullable=True),
        sa.Column("small_group_id", sa.String(length=36), nullable=True),
        sa.Column("lecturer_id", sa.String(length=36), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint(
            "course_code",
            "module_number",
            "small_group_id",
            "lecturer_id",
            name="uq_pbl_assignments_identity",
        ),
    )
    op.create_index("ix_pbl_assignments_course_code", "pbl_assignments", ["course_code"])
    op.create_index("ix_pbl_assignments_lecturer_id", "pbl_assignments", ["lecturer_id"])

    op.create_table(
        "csr_assignments",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("course_code", sa.String(length=50), nullable=False),
        sa.Column("lecturer_id", sa.String(length=36), nullable=False),
        sa.Column("category", csr_category_enum, nullable=False, server_default="reguler"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("course_code", "lecturer_id", "category", name="uq_csr_assignments_identity"),
    )
    op.create_index("ix_csr_assignments_course_code", "csr_assignments", ["course_code"])
    op.create_index("ix_csr_assignments_lecturer_id", "csr_assignments", ["lecturer_id"])

    op.create_table(
        "schedule_resource_locks",
        sa.Column("resource_key", sa.String(length=200), primary_key=True, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("schedule_resource_locks")
    op.drop_index("ix_csr_assignments_lecturer_id", table_name="csr_assignments")
    op.drop_index("ix_csr_assignments_course_code", table_name="csr_assignments")
    op.drop_table("csr_assignments")
    op.drop_index("ix_pbl_assignments_lecturer_id", table_name="pbl_assignments")
    op.drop_index("ix_pbl_assignments_course_code", table_name="pbl_assignments")
    op.drop_table("pbl_assignments")
    for name in reversed(SCHEDULE_TABLES):
        op.drop_table(name)
    op.drop_index("ix_course_offerings_code", table_name="course_offerings")
    op.drop_table("course_offerings")
    for name in ("makeup_group_members", "makeup_groups", "large_group_members", "large_groups"):
        op.drop_table(name)
    op.drop_table("small_group_members")
    op.drop_table("small_groups")
    op.drop_table("students")
    op.drop_table("lecturers")
    op.drop_table("rooms")

    bind = op.get_bind()
    for enum in (non_block_row_type_enum, csr_category_enum, academic_term_enum, course_kind_enum):
        enum.drop(bind, checkfirst=True)
