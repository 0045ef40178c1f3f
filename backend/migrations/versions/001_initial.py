"""initial schema — scoring des tests opinatifs

Revision ID: 001_initial
Create Date: 19/10/2026
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = '001_initial'
down_revision = None

# Valeurs des Enums
USER_ROLE = ('ADMIN', 'SUPER_ADMIN', 'COMPANY_ADMIN', 'USER')
QUESTION_TYPE = ('MULTIPLE_CHOICE', 'OPINION_MULTIPLE', 'ESSAY')

def upgrade() -> None:
    # ── 1. CREATION MANUELLE DES TYPES ENUM (SÉCURISÉE) ──
    enums = {
        "userrole": USER_ROLE,
        "questiontype": QUESTION_TYPE,
    }

    for name, values in enums.items():
        vals_str = ", ".join([f"'{v}'" for v in values])
        op.execute(f"""
            DO $$
            BEGIN
                IF NOT EXISTS (SELECT 1 FROM pg_type WHERE typname = '{name}') THEN
                    CREATE TYPE {name} AS ENUM ({vals_str});
                END IF;
            END $$;
        """)

    # ── 2. CREATION DES TABLES ──
    # Note : postgresql.ENUM(..., create_type=False) empêche SQLAlchemy
    # de tenter une double création.
    question_type = postgresql.ENUM(*QUESTION_TYPE, name='questiontype', create_type=False)

    op.create_table("users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String, nullable=False, unique=True),
        sa.Column("name", sa.String, nullable=True),
        sa.Column("hashed_password", sa.String, nullable=False),
        sa.Column("role", postgresql.ENUM(*USER_ROLE, name='userrole', create_type=False), nullable=False, server_default="USER"),
        sa.Column("is_active", sa.Boolean, default=True),
        sa.Column("company_id", sa.String(36), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_role", "users", ["role"])
    op.create_index("ix_users_company_id", "users", ["company_id"])

    op.create_table("tests",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String, nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("company_id", sa.String(36), nullable=True),
        sa.Column("is_active", sa.Boolean, default=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_tests_company_id", "tests", ["company_id"])

    op.create_table("stages",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("test_id", sa.String(36), sa.ForeignKey("tests.id"), nullable=True),
        sa.Column("title", sa.String, nullable=False),
        sa.Column("order", sa.Integer, default=0),
    )
    op.create_index("ix_stages_test_id", "stages", ["test_id"])

    op.create_table("questions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("stage_id", sa.String(36), sa.ForeignKey("stages.id"), nullable=True),
        sa.Column("text", sa.Text, nullable=False),
        sa.Column("type", question_type, nullable=False, server_default="MULTIPLE_CHOICE"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_questions_stage_id", "questions", ["stage_id"])

    op.create_table("options",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("question_id", sa.String(36), sa.ForeignKey("questions.id", ondelete="CASCADE"), nullable=False),
        sa.Column("text", sa.Text, nullable=False),
        sa.Column("is_correct", sa.Boolean, default=False),
        sa.Column("trait_label", sa.String, nullable=True),
        sa.Column("position", sa.Integer, default=0),
    )
    op.create_index("ix_options_question_id", "options", ["question_id"])

    op.create_table("selection_processes",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String, nullable=False),
        sa.Column("company_id", sa.String(36), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_selection_processes_company_id", "selection_processes", ["company_id"])

    op.create_table("process_stages",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("process_id", sa.String(36), sa.ForeignKey("selection_processes.id"), nullable=False),
        sa.Column("test_id", sa.String(36), sa.ForeignKey("tests.id"), nullable=True),
        sa.Column("name", sa.String, nullable=False),
        sa.Column("order", sa.Integer, default=0),
    )
    op.create_index("ix_process_stages_process_id", "process_stages", ["process_id"])
    op.create_index("ix_process_stages_test_id", "process_stages", ["test_id"])

    op.create_table("personality_configs",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("process_stage_id", sa.String(36), sa.ForeignKey("process_stages.id", ondelete="CASCADE"), unique=True, nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table("trait_weights",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("config_id", sa.String(36), sa.ForeignKey("personality_configs.id", ondelete="CASCADE"), nullable=False),
        sa.Column("trait_name", sa.String, nullable=False),
        sa.Column("weight", sa.Float, nullable=False),
        sa.Column("order", sa.Integer, default=0),
        sa.Column("group_id", sa.String, nullable=True),
        sa.Column("group_name", sa.String, nullable=True),
        sa.UniqueConstraint("config_id", "trait_name", name="uq_config_trait"),
    )
    op.create_index("ix_trait_weights_config_id", "trait_weights", ["config_id"])

    op.create_table("candidates",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String, nullable=True),
        sa.Column("email", sa.String, nullable=True),
        sa.Column("process_id", sa.String(36), sa.ForeignKey("selection_processes.id"), nullable=True),
        sa.Column("test_id", sa.String(36), sa.ForeignKey("tests.id"), nullable=True),
        sa.Column("completed", sa.Boolean, default=False),
        sa.Column("time_spent", sa.Integer, default=0),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_candidates_email", "candidates", ["email"])
    op.create_index("ix_candidates_process_id", "candidates", ["process_id"])
    op.create_index("ix_candidates_test_id", "candidates", ["test_id"])

    # question_id / option_id sans FK : survivent à la suppression de la source
    op.create_table("responses",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("candidate_id", sa.String(36), sa.ForeignKey("candidates.id"), nullable=False),
        sa.Column("question_id", sa.String(36), nullable=True),
        sa.Column("option_id", sa.String(36), nullable=True),
        sa.Column("question_text", sa.Text, nullable=True),
        sa.Column("option_text", sa.Text, nullable=True),
        sa.Column("question_type", question_type, nullable=True),
        sa.Column("is_correct", sa.Boolean, nullable=True),
        sa.Column("trait_label", sa.String, nullable=True),
        sa.Column("stage_id", sa.String(36), nullable=True),
        sa.Column("stage_name", sa.String, nullable=True),
        sa.Column("time_spent", sa.Integer, default=0),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_responses_candidate_id", "responses", ["candidate_id"])
    op.create_index("ix_responses_question_id", "responses", ["question_id"])


def downgrade() -> None:
    for table in (
        "responses", "candidates",
        "trait_weights", "personality_configs", "process_stages", "selection_processes",
        "options", "questions", "stages", "tests",
        "users",
    ):
        op.drop_table(table)

    op.execute("DROP TYPE IF EXISTS questiontype")
    op.execute("DROP TYPE IF EXISTS userrole")
