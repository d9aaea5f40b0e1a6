"""Enumerations shared by models, services and request schemas.

Values match the CHECK constraints created by migration 001.
"""

from enum import Enum


class _ValueEnum(Enum):
    """Enum with string values stored verbatim in the database."""

    @classmethod
    def from_string(cls, value: str):  # noqa: ANN206 - returns the subclass
        """Convert a database string to enum.

        Raises:
            ValueError: If the string doesn't match any member.
        """
        for member in cls:
            if member.value == value:
                return member
        valid = [m.value for m in cls]
        raise ValueError(f"Invalid {cls.__name__}: '{value}'. Valid: {valid}")

    @classmethod
    def values(cls) -> list[str]:
        return [m.value for m in cls]


def check_in(column: str, enum_cls: type[_ValueEnum]) -> str:
    """Build a SQL ``column IN (...)`` fragment for a CheckConstraint."""
    quoted = ", ".join(f"'{v}'" for v in enum_cls.values())
    return f"{column} IN ({quoted})"


# =============================================================================
# Users
# =============================================================================


class ProfileName(_ValueEnum):
    ADMIN = "Admin"
    COMPANY = "Company"
    CANDIDATE = "Candidate"


class TrainerRole(_ValueEnum):
    COACH = "Coach"
    TRAINER = "Trainer"


# =============================================================================
# Job postings and offers
# =============================================================================


class PostingStatus(_ValueEnum):
    PENDING = "pending"
    PUBLISHED = "published"
    EXPIRED = "expired"
    ARCHIVED = "archived"
    REJECTED = "rejected"


class ContractType(_ValueEnum):
    PERMANENT = "permanent"
    FIXED_TERM = "fixed-term"
    INTERNSHIP = "internship"
    FREELANCE = "freelance"
    APPRENTICESHIP = "apprenticeship"


class OfferStatus(_ValueEnum):
    OPEN = "open"
    CLOSED = "closed"
    REJECTED = "rejected"


class ApplicationStatus(_ValueEnum):
    PENDING = "pending"
    UNDER_REVIEW = "under-review"
    ACCEPTED = "accepted"
    REFUSED = "refused"


# =============================================================================
# Interviews and contracts
# =============================================================================


class InterviewKind(_ValueEnum):
    APPLICATION = "application"
    POSTING = "posting"


class InterviewStatus(_ValueEnum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class InterviewOutcome(_ValueEnum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    PENDING = "pending"


class ContractState(_ValueEnum):
    DRAFT = "draft"
    PUBLISHED = "published"
    SIGNED = "signed"
    REJECTED = "rejected"


# =============================================================================
# Missions
# =============================================================================


class MissionStatus(_ValueEnum):
    TODO = "todo"
    IN_PROGRESS = "in-progress"
    DONE = "done"
    VALIDATED = "validated"
    CANCELLED = "cancelled"


class ValidationState(_ValueEnum):
    PENDING = "pending"
    VALIDATED = "validated"
    REJECTED = "rejected"


# =============================================================================
# Time tracking
# =============================================================================


class AbsenceType(_ValueEnum):
    SICK = "sick"
    PAID_LEAVE = "paid-leave"
    UNPAID_LEAVE = "unpaid-leave"
    OTHER = "other"


# =============================================================================
# Trainings
# =============================================================================


class TrainingModality(_ValueEnum):
    IN_PERSON = "in-person"
    VIRTUAL = "virtual"
    HYBRID = "hybrid"
    CONTENT = "content"


class TrainingStatus(_ValueEnum):
    DRAFT = "draft"
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TrainingType(_ValueEnum):
    LANGUAGE = "language"
    CERTIFICATION = "certification"
    OTHER = "other"


class ContentType(_ValueEnum):
    VIDEO = "video"
    DOCUMENT = "document"
    QUIZ = "quiz"
    OTHER = "other"


# =============================================================================
# Notifications
# =============================================================================


class NotificationType(_ValueEnum):
    ENTRETIEN_PLANIFIE = "ENTRETIEN_PLANIFIE"
    ENTRETIEN_ANNULE = "ENTRETIEN_ANNULE"
    CANDIDATURE_ACCEPTEE = "CANDIDATURE_ACCEPTEE"
    CANDIDATURE_REFUSEE = "CANDIDATURE_REFUSEE"
    ENTRETIEN_EVALUE = "ENTRETIEN_EVALUE"
    CONTRAT_PUBLIE = "CONTRAT_PUBLIE"
    PREPARER_CONTRAT = "PREPARER_CONTRAT"
    OFFRE_REJETEE = "OFFRE_REJETEE"
    NOUVELLE_MISSION = "NOUVELLE_MISSION"
    NEW_USER = "NEW_USER"
    FEEDBACK_COMPTE_RENDU = "FEEDBACK_COMPTE_RENDU"
    CONTRAT_REJETE_CANDIDAT = "CONTRAT_REJETE_CANDIDAT"
    NEW_FORMATION = "NEW_FORMATION"
    NEW_FORMATION_ASSIGNMENT = "NEW_FORMATION_ASSIGNMENT"
