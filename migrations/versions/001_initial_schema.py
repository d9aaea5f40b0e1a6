"""Create the recruitment, employment and notification tables.

Revision ID: 001_initial_schema
Revises: 000_enable_extensions
Create Date: 2026-10-19

Tables are created in foreign-key order. The two reference cycles
(job_postings and applications pointing back at interviews) are closed with
ALTER TABLE once interviews exists. The three profiles are seeded.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001_initial_schema"
down_revision: str | None = "000_enable_extensions"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

CONTRACT_TYPES = "'permanent', 'fixed-term', 'internship', 'freelance', 'apprenticeship'"
VALIDATION_STATES = "'pending', 'validated', 'rejected'"
NOTIFICATION_TYPES = ", ".join(
    f"'{t}'"
    for t in (
        "ENTRETIEN_PLANIFIE",
        "ENTRETIEN_ANNULE",
        "CANDIDATURE_ACCEPTEE",
        "CANDIDATURE_REFUSEE",
        "ENTRETIEN_EVALUE",
        "CONTRAT_PUBLIE",
        "PREPARER_CONTRAT",
        "OFFRE_REJETEE",
        "NOUVELLE_MISSION",
        "NEW_USER",
        "FEEDBACK_COMPTE_RENDU",
        "CONTRAT_REJETE_CANDIDAT",
        "NEW_FORMATION",
        "NEW_FORMATION_ASSIGNMENT",
    )
)


def _id() -> sa.Column:
    return sa.Column(
        "id",
        sa.UUID(),
        primary_key=True,
        server_default=sa.text("gen_random_uuid()"),
    )


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.func.now(),
    )


def _timestamps() -> list[sa.Column]:
    return [_timestamp("created_at"), _timestamp("updated_at")]


def upgrade() -> None:
    # =========================================================================
    # Users and profiles
    # =========================================================================
    op.create_table(
        "users",
        _id(),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=True),
        sa.Column("role", sa.String(20), nullable=True),
        sa.Column("company_name", sa.String(255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        *_timestamps(),
        sa.CheckConstraint(
            "role IS NULL OR role IN ('Coach', 'Trainer')", name="ck_users_role"
        ),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )
    op.create_table(
        "profiles",
        _id(),
        sa.Column("name", sa.String(50), nullable=False),
        sa.UniqueConstraint("name", name="uq_profiles_name"),
    )
    op.create_table(
        "user_profiles",
        sa.Column("user_id", sa.UUID(), primary_key=True),
        sa.Column("profile_id", sa.UUID(), primary_key=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["profile_id"], ["profiles.id"], ondelete="CASCADE"),
    )
    op.execute(
        "INSERT INTO profiles (name) VALUES ('Admin'), ('Company'), ('Candidate')"
    )

    # =========================================================================
    # Blob store
    # =========================================================================
    op.create_table(
        "stored_files",
        _id(),
        sa.Column("filename", sa.String(255), nullable=False),
        sa.Column("content_type", sa.String(100), nullable=False),
        sa.Column("size", sa.Integer(), nullable=False),
        sa.Column("metadata", postgresql.JSONB(), nullable=True),
        sa.Column("data", sa.LargeBinary(), nullable=False),
        *_timestamps(),
    )

    # =========================================================================
    # Recruitment
    # =========================================================================
    op.create_table(
        "cv_profiles",
        _id(),
        sa.Column("user_id", sa.UUID(), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("profession", sa.String(50), nullable=False),
        sa.Column("skills", postgresql.JSONB(), nullable=False),
        sa.Column("cv_file_handle", sa.String(500), nullable=True),
        sa.Column("cv_filename", sa.String(255), nullable=True),
        sa.Column("cv_mimetype", sa.String(100), nullable=True),
        sa.Column("cv_size", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_cv_profiles_user_id", "cv_profiles", ["user_id"])

    op.create_table(
        "job_postings",
        _id(),
        sa.Column("owner_candidate_id", sa.UUID(), nullable=False),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("profession", sa.String(50), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("contract_type", sa.String(20), nullable=False),
        sa.Column("location", sa.String(255), nullable=False),
        sa.Column("required_skills", postgresql.JSONB(), nullable=False),
        sa.Column("desired_salary", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("is_validated", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("rejection_reason", sa.String(500), nullable=True),
        sa.Column("expiration_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("linked_cv_profile_id", sa.UUID(), nullable=True),
        sa.Column("linked_interview_id", sa.UUID(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["owner_candidate_id"], ["users.id"], ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["linked_cv_profile_id"], ["cv_profiles.id"], ondelete="SET NULL"
        ),
        sa.CheckConstraint(
            "status IN ('pending', 'published', 'expired', 'archived', 'rejected')",
            name="ck_job_postings_status",
        ),
        sa.CheckConstraint(
            f"contract_type IN ({CONTRACT_TYPES})",
            name="ck_job_postings_contract_type",
        ),
        sa.CheckConstraint(
            "desired_salary IS NULL OR (desired_salary >= 0 AND desired_salary <= 1000000)",
            name="ck_job_postings_desired_salary",
        ),
        sa.CheckConstraint(
            "status <> 'rejected' OR is_validated = false",
            name="ck_job_postings_rejected_not_validated",
        ),
    )
    op.create_index("ix_job_postings_owner", "job_postings", ["owner_candidate_id"])
    op.create_index("ix_job_postings_status", "job_postings", ["status"])

    op.create_table(
        "posting_saves",
        _id(),
        sa.Column("posting_id", sa.UUID(), nullable=False),
        sa.Column("user_id", sa.UUID(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["posting_id"], ["job_postings.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.UniqueConstraint(
            "posting_id", "user_id", name="uq_posting_saves_posting_user"
        ),
    )
    op.create_index("ix_posting_saves_user_id", "posting_saves", ["user_id"])

    op.create_table(
        "job_offers",
        _id(),
        sa.Column("company_id", sa.UUID(), nullable=False),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("location", sa.String(255), nullable=False),
        sa.Column("contract_type", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="open"),
        sa.Column("is_validated", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("validation_comment", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["company_id"], ["users.id"], ondelete="CASCADE"),
        sa.CheckConstraint(
            "status IN ('open', 'closed', 'rejected')", name="ck_job_offers_status"
        ),
        sa.CheckConstraint(
            "status <> 'rejected' OR is_validated = false",
            name="ck_job_offers_rejected_not_validated",
        ),
        sa.CheckConstraint(
            f"contract_type IN ({CONTRACT_TYPES})",
            name="ck_job_offers_contract_type",
        ),
    )
    op.create_index("ix_job_offers_company_id", "job_offers", ["company_id"])

    op.create_table(
        "applications",
        _id(),
        sa.Column("offer_id", sa.UUID(), nullable=False),
        sa.Column("candidate_id", sa.UUID(), nullable=False),
        sa.Column("cv_profile_id", sa.UUID(), nullable=True),
        sa.Column("cover_note", sa.Text(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("interview_id", sa.UUID(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["offer_id"], ["job_offers.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["candidate_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["cv_profile_id"], ["cv_profiles.id"], ondelete="SET NULL"
        ),
        sa.CheckConstraint(
            "status IN ('pending', 'under-review', 'accepted', 'refused')",
            name="ck_applications_status",
        ),
        sa.UniqueConstraint(
            "offer_id", "candidate_id", name="uq_applications_offer_candidate"
        ),
    )
    op.create_index("ix_applications_candidate_id", "applications", ["candidate_id"])

    op.create_table(
        "interviews",
        _id(),
        sa.Column("kind", sa.String(20), nullable=False),
        sa.Column("candidate_id", sa.UUID(), nullable=False),
        sa.Column("company_id", sa.UUID(), nullable=False),
        sa.Column("created_by", sa.UUID(), nullable=False),
        sa.Column("offer_id", sa.UUID(), nullable=True),
        sa.Column("related_application_id", sa.UUID(), nullable=True),
        sa.Column("related_posting_id", sa.UUID(), nullable=True),
        sa.Column("scheduled_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("meeting_link", sa.String(500), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="scheduled"),
        sa.Column("outcome", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["candidate_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["company_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["offer_id"], ["job_offers.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(
            ["related_application_id"], ["applications.id"], ondelete="SET NULL"
        ),
        sa.ForeignKeyConstraint(
            ["related_posting_id"], ["job_postings.id"], ondelete="CASCADE"
        ),
        sa.CheckConstraint(
            "kind IN ('application', 'posting')", name="ck_interviews_kind"
        ),
        sa.CheckConstraint(
            "status IN ('scheduled', 'completed', 'cancelled')",
            name="ck_interviews_status",
        ),
        sa.CheckConstraint(
            "outcome IN ('positive', 'negative', 'pending')",
            name="ck_interviews_outcome",
        ),
        sa.CheckConstraint(
            "kind <> 'posting' OR related_posting_id IS NOT NULL",
            name="ck_interviews_posting_reference",
        ),
    )
    op.create_index("ix_interviews_company", "interviews", ["company_id"])
    op.create_index("ix_interviews_candidate", "interviews", ["candidate_id"])

    op.create_foreign_key(
        "fk_job_postings_linked_interview",
        "job_postings",
        "interviews",
        ["linked_interview_id"],
        ["id"],
        ondelete="SET NULL",
    )
    op.create_foreign_key(
        "fk_applications_interview",
        "applications",
        "interviews",
        ["interview_id"],
        ["id"],
        ondelete="SET NULL",
    )

    op.create_table(
        "contracts",
        _id(),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("employee_id", sa.UUID(), nullable=False),
        sa.Column("company_id", sa.UUID(), nullable=False),
        sa.Column("created_by", sa.UUID(), nullable=False),
        sa.Column("interview_id", sa.UUID(), nullable=True),
        sa.Column("offer_id", sa.UUID(), nullable=True),
        sa.Column("contract_type", sa.String(20), nullable=False),
        sa.Column("position", sa.String(200), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("salary", sa.Integer(), nullable=True),
        sa.Column("state", sa.String(20), nullable=False, server_default="draft"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["employee_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["company_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["interview_id"], ["interviews.id"], ondelete="SET NULL"
        ),
        sa.ForeignKeyConstraint(["offer_id"], ["job_offers.id"], ondelete="SET NULL"),
        sa.CheckConstraint(
            "state IN ('draft', 'published', 'signed', 'rejected')",
            name="ck_contracts_state",
        ),
        sa.CheckConstraint(
            f"contract_type IN ({CONTRACT_TYPES})",
            name="ck_contracts_contract_type",
        ),
        sa.CheckConstraint(
            "end_date IS NULL OR end_date > start_date", name="ck_contracts_dates"
        ),
    )
    op.create_index("ix_contracts_employee_id", "contracts", ["employee_id"])
    op.create_index("ix_contracts_company_id", "contracts", ["company_id"])

    # =========================================================================
    # Employment
    # =========================================================================
    op.create_table(
        "missions",
        _id(),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="todo"),
        sa.Column("company_id", sa.UUID(), nullable=False),
        sa.Column("employee_id", sa.UUID(), nullable=False),
        sa.Column("contract_id", sa.UUID(), nullable=False),
        sa.Column(
            "company_validation", sa.String(20), nullable=False, server_default="pending"
        ),
        sa.Column(
            "admin_validation", sa.String(20), nullable=False, server_default="pending"
        ),
        sa.Column("report_file_id", sa.String(500), nullable=True),
        sa.Column("report_filename", sa.String(255), nullable=True),
        sa.Column("report_submitted_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["company_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["employee_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["contract_id"], ["contracts.id"], ondelete="RESTRICT"),
        sa.CheckConstraint(
            "status IN ('todo', 'in-progress', 'done', 'validated', 'cancelled')",
            name="ck_missions_status",
        ),
        sa.CheckConstraint(
            f"company_validation IN ({VALIDATION_STATES})",
            name="ck_missions_company_validation",
        ),
        sa.CheckConstraint(
            f"admin_validation IN ({VALIDATION_STATES})",
            name="ck_missions_admin_validation",
        ),
        sa.CheckConstraint(
            "end_date IS NULL OR end_date > start_date", name="ck_missions_dates"
        ),
    )
    op.create_index("ix_missions_company", "missions", ["company_id"])
    op.create_index("ix_missions_employee", "missions", ["employee_id"])
    op.create_index("ix_missions_contract_id", "missions", ["contract_id"])

    op.create_table(
        "mission_feedback",
        _id(),
        sa.Column("mission_id", sa.UUID(), nullable=False),
        sa.Column("author_id", sa.UUID(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["mission_id"], ["missions.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["author_id"], ["users.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_mission_feedback_mission_id", "mission_feedback", ["mission_id"])

    op.create_table(
        "trainings",
        _id(),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("description", sa.String(500), nullable=False),
        sa.Column("modality", sa.String(20), nullable=False),
        sa.Column("training_type", sa.String(20), nullable=False),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("meeting_link", sa.String(255), nullable=True),
        sa.Column("scheduled_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("starts_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("ends_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="draft"),
        sa.Column("mission_id", sa.UUID(), nullable=False),
        sa.Column("company_id", sa.UUID(), nullable=False),
        sa.Column("employee_id", sa.UUID(), nullable=False),
        sa.Column("trainer_id", sa.UUID(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["mission_id"], ["missions.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["company_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["employee_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["trainer_id"], ["users.id"], ondelete="RESTRICT"),
        sa.CheckConstraint(
            "modality IN ('in-person', 'virtual', 'hybrid', 'content')",
            name="ck_trainings_modality",
        ),
        sa.CheckConstraint(
            "status IN ('draft', 'scheduled', 'in-progress', 'completed', 'cancelled')",
            name="ck_trainings_status",
        ),
        sa.CheckConstraint(
            "training_type IN ('language', 'certification', 'other')",
            name="ck_trainings_training_type",
        ),
    )
    op.create_index("ix_trainings_company", "trainings", ["company_id"])
    op.create_index("ix_trainings_employee", "trainings", ["employee_id"])
    op.create_index("ix_trainings_trainer", "trainings", ["trainer_id"])
    op.create_index("ix_trainings_mission_id", "trainings", ["mission_id"])

    op.create_table(
        "training_contents",
        _id(),
        sa.Column("training_id", sa.UUID(), nullable=False),
        sa.Column("content_type", sa.String(20), nullable=False),
        sa.Column("url", sa.String(1000), nullable=False),
        sa.Column("file_handle", sa.String(300), nullable=True),
        sa.Column("title", sa.String(200), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        _timestamp("added_at"),
        sa.ForeignKeyConstraint(["training_id"], ["trainings.id"], ondelete="CASCADE"),
        sa.CheckConstraint(
            "content_type IN ('video', 'document', 'quiz', 'other')",
            name="ck_training_contents_content_type",
        ),
    )
    op.create_index(
        "ix_training_contents_training_id", "training_contents", ["training_id"]
    )

    op.create_table(
        "training_progress",
        _id(),
        sa.Column("training_id", sa.UUID(), nullable=False),
        sa.Column("employee_id", sa.UUID(), nullable=False),
        sa.Column("content_id", sa.UUID(), nullable=False),
        sa.Column("completed", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["training_id"], ["trainings.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["employee_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["content_id"], ["training_contents.id"], ondelete="CASCADE"
        ),
        sa.UniqueConstraint(
            "training_id",
            "employee_id",
            "content_id",
            name="uq_training_progress_training_employee_content",
        ),
    )

    # =========================================================================
    # Notifications
    # =========================================================================
    op.create_table(
        "notifications",
        _id(),
        sa.Column("recipient_user_id", sa.UUID(), nullable=False),
        sa.Column("sender_company_id", sa.UUID(), nullable=True),
        sa.Column("type", sa.String(40), nullable=False),
        sa.Column(
            "payload",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column("read", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("posting_id", sa.UUID(), nullable=True),
        sa.Column("interview_id", sa.UUID(), nullable=True),
        sa.Column("application_id", sa.UUID(), nullable=True),
        sa.Column("offer_id", sa.UUID(), nullable=True),
        sa.Column("contract_id", sa.UUID(), nullable=True),
        sa.Column("mission_id", sa.UUID(), nullable=True),
        sa.Column("training_id", sa.UUID(), nullable=True),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(
            ["recipient_user_id"], ["users.id"], ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["sender_company_id"], ["users.id"], ondelete="SET NULL"
        ),
        sa.ForeignKeyConstraint(["posting_id"], ["job_postings.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["interview_id"], ["interviews.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(
            ["application_id"], ["applications.id"], ondelete="SET NULL"
        ),
        sa.ForeignKeyConstraint(["offer_id"], ["job_offers.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["contract_id"], ["contracts.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["mission_id"], ["missions.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["training_id"], ["trainings.id"], ondelete="SET NULL"),
        sa.CheckConstraint(
            f"type IN ({NOTIFICATION_TYPES})", name="ck_notifications_type"
        ),
    )
    op.create_index(
        "ix_notifications_recipient_read",
        "notifications",
        ["recipient_user_id", "read"],
    )

    op.create_table(
        "notification_replies",
        _id(),
        sa.Column("notification_id", sa.UUID(), nullable=False),
        sa.Column("sender_id", sa.UUID(), nullable=False),
        sa.Column("content", sa.String(1000), nullable=False),
        sa.Column("read", sa.Boolean(), nullable=False, server_default="false"),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(
            ["notification_id"], ["notifications.id"], ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(["sender_id"], ["users.id"], ondelete="CASCADE"),
    )
    op.create_index(
        "ix_notification_replies_notification_id",
        "notification_replies",
        ["notification_id"],
    )

    # Outbox for intents that could not be written after retries
    op.create_table(
        "pending_notifications",
        _id(),
        sa.Column("intent", postgresql.JSONB(), nullable=False),
        sa.Column("attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_error", sa.Text(), nullable=True),
        sa.Column("next_attempt_at", sa.DateTime(timezone=True), nullable=True),
        _timestamp("created_at"),
    )


def downgrade() -> None:
    op.drop_table("pending_notifications")
    op.drop_table("notification_replies")
    op.drop_table("notifications")
    op.drop_table("training_progress")
    op.drop_table("training_contents")
    op.drop_table("trainings")
    op.drop_table("mission_feedback")
    op.drop_table("missions")
    op.drop_table("contracts")
    op.drop_constraint("fk_applications_interview", "applications", type_="foreignkey")
    op.drop_constraint(
        "fk_job_postings_linked_interview", "job_postings", type_="foreignkey"
    )
    op.drop_table("interviews")
    op.drop_table("applications")
    op.drop_table("job_offers")
    op.drop_table("posting_saves")
    op.drop_table("job_postings")
    op.drop_table("cv_profiles")
    op.drop_table("stored_files")
    op.drop_table("user_profiles")
    op.drop_table("profiles")
    op.drop_table("users")
