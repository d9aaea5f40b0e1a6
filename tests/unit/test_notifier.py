"""Tests for the notifier: lifecycle events to notification intents."""

import uuid
from datetime import UTC, datetime

from grh.models.enums import InterviewKind, InterviewOutcome, NotificationType
from grh.services.notifier import (
    AccountRegistered,
    ApplicationAccepted,
    ApplicationRefused,
    ContractPublished,
    ContractRejected,
    InterviewCancelled,
    InterviewEvaluated,
    InterviewRescheduled,
    InterviewScheduled,
    MissionCreated,
    MissionFeedbackAdded,
    NotificationIntent,
    OfferRejected,
    PostingPublishToggled,
    PostingRejected,
    PostingValidated,
    TrainingCreated,
    on_transition,
)

WHEN = datetime(2026, 3, 10, 14, 0, tzinfo=UTC)
CANDIDATE_ID = uuid.uuid4()
COMPANY_ID = uuid.uuid4()


def _types(intents: list[NotificationIntent]) -> list[NotificationType]:
    return [i.type for i in intents]


class TestInterviewEvents:
    def test_scheduled_notifies_candidate(self):
        """Scheduling should notify the candidate with date, link and refs."""
        interview_id, posting_id = uuid.uuid4(), uuid.uuid4()

        intents = on_transition(
            InterviewScheduled(
                interview_id=interview_id,
                candidate_id=CANDIDATE_ID,
                company_id=COMPANY_ID,
                kind=InterviewKind.POSTING,
                scheduled_at=WHEN,
                meeting_link="https://meet.example.com/a",
                posting_id=posting_id,
            )
        )

        assert len(intents) == 1
        intent = intents[0]
        assert intent.type == NotificationType.ENTRETIEN_PLANIFIE
        assert intent.recipient_user_id == CANDIDATE_ID
        assert intent.sender_company_id == COMPANY_ID
        assert intent.refs == {"interview_id": interview_id, "posting_id": posting_id}
        assert intent.payload["meeting_link"] == "https://meet.example.com/a"

    def test_rescheduled_is_flagged(self):
        """Rescheduling should reuse ENTRETIEN_PLANIFIE with rescheduled set."""
        intents = on_transition(
            InterviewRescheduled(
                interview_id=uuid.uuid4(),
                candidate_id=CANDIDATE_ID,
                company_id=COMPANY_ID,
                scheduled_at=WHEN,
                meeting_link="https://meet.example.com/b",
            )
        )
        assert _types(intents) == [NotificationType.ENTRETIEN_PLANIFIE]
        assert intents[0].payload["rescheduled"] is True

    def test_cancelled(self):
        """Cancelling should notify the candidate."""
        intents = on_transition(
            InterviewCancelled(uuid.uuid4(), CANDIDATE_ID, COMPANY_ID)
        )
        assert _types(intents) == [NotificationType.ENTRETIEN_ANNULE]
        assert intents[0].recipient_user_id == CANDIDATE_ID

    def test_positive_evaluation_notifies_each_admin_once(self):
        """A positive evaluation should add one PREPARER_CONTRAT per admin."""
        admin_a, admin_b = uuid.uuid4(), uuid.uuid4()

        intents = on_transition(
            InterviewEvaluated(
                interview_id=uuid.uuid4(),
                candidate_id=CANDIDATE_ID,
                company_id=COMPANY_ID,
                outcome=InterviewOutcome.POSITIVE,
                admin_ids=(admin_a, admin_b, admin_a),
                candidate_name="Camille Martin",
            )
        )

        assert _types(intents) == [
            NotificationType.ENTRETIEN_EVALUE,
            NotificationType.PREPARER_CONTRAT,
            NotificationType.PREPARER_CONTRAT,
        ]
        assert intents[0].recipient_user_id == CANDIDATE_ID
        assert [i.recipient_user_id for i in intents[1:]] == [admin_a, admin_b]
        assert "Camille Martin" in intents[1].payload["message"]

    def test_negative_evaluation_notifies_candidate_only(self):
        """A negative evaluation should not reach the admins."""
        intents = on_transition(
            InterviewEvaluated(
                interview_id=uuid.uuid4(),
                candidate_id=CANDIDATE_ID,
                company_id=COMPANY_ID,
                outcome=InterviewOutcome.NEGATIVE,
                admin_ids=(uuid.uuid4(),),
            )
        )
        assert _types(intents) == [NotificationType.ENTRETIEN_EVALUE]


class TestWorkEvents:
    def test_mission_created(self):
        """A new mission should notify the employee."""
        mission_id = uuid.uuid4()
        intents = on_transition(
            MissionCreated(mission_id, CANDIDATE_ID, COMPANY_ID, "Audit", WHEN)
        )
        assert _types(intents) == [NotificationType.NOUVELLE_MISSION]
        assert intents[0].refs == {"mission_id": mission_id}
        assert intents[0].payload["end_date"] is None

    def test_feedback_added(self):
        """Report feedback should reach the employee with its text."""
        intents = on_transition(
            MissionFeedbackAdded(uuid.uuid4(), CANDIDATE_ID, COMPANY_ID, "Audit", "Good job")
        )
        assert _types(intents) == [NotificationType.FEEDBACK_COMPTE_RENDU]
        assert intents[0].payload["feedback"] == "Good job"

    def test_training_created_notifies_employee_and_trainer(self):
        """A training should produce NEW_FORMATION and NEW_FORMATION_ASSIGNMENT."""
        trainer_id = uuid.uuid4()
        intents = on_transition(
            TrainingCreated(
                training_id=uuid.uuid4(),
                mission_id=uuid.uuid4(),
                employee_id=CANDIDATE_ID,
                trainer_id=trainer_id,
                company_id=COMPANY_ID,
                title="English B2",
                modality="virtual",
            )
        )
        assert [(i.type, i.recipient_user_id) for i in intents] == [
            (NotificationType.NEW_FORMATION, CANDIDATE_ID),
            (NotificationType.NEW_FORMATION_ASSIGNMENT, trainer_id),
        ]


class TestRecruitmentEvents:
    def test_application_refused(self):
        """A refusal should notify the candidate."""
        intents = on_transition(
            ApplicationRefused(uuid.uuid4(), CANDIDATE_ID, COMPANY_ID, uuid.uuid4(), "Dev")
        )
        assert _types(intents) == [NotificationType.CANDIDATURE_REFUSEE]

    def test_application_accepted(self):
        """An accepted application should notify the candidate with both refs."""
        application_id, offer_id = uuid.uuid4(), uuid.uuid4()
        [intent] = on_transition(
            ApplicationAccepted(application_id, CANDIDATE_ID, COMPANY_ID, offer_id, "Dev")
        )
        assert intent.type == NotificationType.CANDIDATURE_ACCEPTEE
        assert intent.recipient_user_id == CANDIDATE_ID
        assert intent.refs == {"application_id": application_id, "offer_id": offer_id}
        assert "Dev" in intent.payload["message"]

    def test_offer_rejected(self):
        """A rejected offer should notify its company."""
        offer_id = uuid.uuid4()
        [intent] = on_transition(OfferRejected(offer_id, COMPANY_ID, "Dev"))
        assert intent.type == NotificationType.OFFRE_REJETEE
        assert intent.recipient_user_id == COMPANY_ID
        assert intent.refs == {"offer_id": offer_id}

    def test_account_registered_notifies_admins_once(self):
        """A registration should reach each admin once."""
        admin = uuid.uuid4()
        user_id = uuid.uuid4()
        intents = on_transition(AccountRegistered(user_id, "Nora", (admin, admin)))
        assert _types(intents) == [NotificationType.NEW_USER]
        assert intents[0].payload["user_id"] == str(user_id)

    def test_contract_published(self):
        """A published contract should notify the employee."""
        intents = on_transition(
            ContractPublished(uuid.uuid4(), CANDIDATE_ID, COMPANY_ID, "CDI")
        )
        assert _types(intents) == [NotificationType.CONTRAT_PUBLIE]

    def test_contract_rejected_notifies_admins(self):
        """A rejected contract should notify every admin."""
        admins = (uuid.uuid4(), uuid.uuid4())
        intents = on_transition(
            ContractRejected(uuid.uuid4(), CANDIDATE_ID, COMPANY_ID, "CDI", admins)
        )
        assert _types(intents) == [NotificationType.CONTRAT_REJETE_CANDIDAT] * 2
        assert tuple(i.recipient_user_id for i in intents) == admins

    def test_silent_events(self):
        """Posting validation, rejection and publish toggles should notify nobody."""
        posting_id = uuid.uuid4()
        assert on_transition(PostingValidated(posting_id, CANDIDATE_ID)) == []
        assert on_transition(PostingRejected(posting_id, CANDIDATE_ID, "Spam")) == []
        assert on_transition(PostingPublishToggled(posting_id, CANDIDATE_ID, True)) == []

    def test_unknown_event(self):
        """Objects without a handler should produce no intents."""
        assert on_transition(object()) == []


class TestIntentSerialization:
    def test_from_dict_restores_intent(self):
        """An intent rebuilt from the outbox should equal the original."""
        intent = NotificationIntent(
            recipient_user_id=CANDIDATE_ID,
            type=NotificationType.NOUVELLE_MISSION,
            payload={"message": "hello"},
            sender_company_id=COMPANY_ID,
            refs={"mission_id": uuid.uuid4()},
        )
        assert NotificationIntent.from_dict(intent.to_dict()) == intent

    def test_unknown_refs_dropped(self):
        """Reference keys outside the known set should be ignored."""
        data = {
            "recipient_user_id": str(CANDIDATE_ID),
            "type": "NOUVELLE_MISSION",
            "payload": {},
            "refs": {"mission_id": str(uuid.uuid4()), "bogus_id": str(uuid.uuid4())},
        }
        intent = NotificationIntent.from_dict(data)
        assert set(intent.refs) == {"mission_id"}
        assert intent.sender_company_id is None
