from datetime import datetime

import pytest

from neurocare.extensions import db
from neurocare.models.criminal_record_verification import CriminalRecordVerification
from neurocare.models.enums import VerificationStatus as S
from neurocare.models.notification import Notification
from neurocare.models.verification_document import VerificationDocument
from neurocare.models.video_interview import VideoInterview
from neurocare.services import documents, review
from neurocare.services.errors import RecomputeError, TransitionError, ValidationError

from factories import approve_all, make_educator, upload_all


def verified_documents_educator(**kwargs):
    educator = make_educator(**kwargs)
    docs = upload_all(educator)
    approve_all(docs)
    return educator, docs


def test_happy_path_ends_verified_and_visible(ctx):
    educator, _ = verified_documents_educator()
    assert educator.status is S.DOCUMENTS_VERIFIED
    assert (educator.verification_badge, educator.profile_visible) == (False, False)

    review.schedule_interview(educator.id, datetime(2025, 3, 1, 10, 0), "Visio Teams")
    assert educator.status is S.INTERVIEW_SCHEDULED
    assert educator.verification_badge is False

    review.approve_educator(educator.id)
    assert educator.status is S.VERIFIED
    assert (educator.verification_badge, educator.profile_visible) == (True, True)
    interview = VideoInterview.query.filter_by(educator_id=educator.id).one()
    assert interview.status == "passed"
    assert interview.overall_result == "passed"
    assert interview.completed_at is not None


def test_criminal_record_rejection_is_terminal(ctx):
    educator = make_educator()
    docs = upload_all(educator)
    assert educator.status is S.DOCUMENTS_SUBMITTED

    review.reject_document(docs["criminal_record"].id, "Mention au bulletin n°3")

    assert educator.status is S.REJECTED_CRIMINAL_RECORD
    assert (educator.verification_badge, educator.profile_visible) == (False, False)
    audit = CriminalRecordVerification.query.filter_by(educator_id=educator.id).one()
    assert audit.is_clean is False
    assert audit.notes == "Mention au bulletin n°3"

    for key in ("diploma", "id_card", "insurance"):
        review.approve_document(docs[key].id)
    assert educator.status is S.REJECTED_CRIMINAL_RECORD
    assert educator.verification_badge is False


def test_pending_criminal_record_keeps_the_profile_hidden(ctx):
    educator = make_educator()
    docs = upload_all(educator)

    for key in ("diploma", "id_card", "insurance"):
        review.approve_document(docs[key].id)

    assert educator.status is S.DOCUMENTS_SUBMITTED
    assert educator.verification_badge is False
    assert educator.profile_visible is False
    assert db.session.get(VerificationDocument, docs["criminal_record"].id).status == "pending"


def test_rejecting_the_last_pending_criminal_record(ctx):
    educator = make_educator()
    docs = upload_all(educator)
    for key in ("diploma", "id_card", "insurance"):
        review.approve_document(docs[key].id)

    review.reject_document(docs["criminal_record"].id, "Casier non vierge")

    assert educator.status is S.REJECTED_CRIMINAL_RECORD
    assert (educator.verification_badge, educator.profile_visible) == (False, False)
    audit = CriminalRecordVerification.query.filter_by(educator_id=educator.id).all()
    assert [(a.is_clean, a.notes) for a in audit] == [(False, "Casier non vierge")]


def test_criminal_record_rejection_revokes_a_verified_profile(ctx):
    educator, docs = verified_documents_educator()
    review.schedule_interview(educator.id, "2025-03-01T10:00")
    review.approve_educator(educator.id)
    assert educator.profile_visible is True

    review.reject_document(docs["criminal_record"].id, "Condamnation révélée")
    assert educator.status is S.REJECTED_CRIMINAL_RECORD
    assert (educator.verification_badge, educator.profile_visible) == (False, False)


def test_rejecting_a_document_after_verification_regresses(ctx):
    educator, docs = verified_documents_educator()

    review.reject_document(docs["diploma"].id, "Illisible")

    assert educator.status is S.DOCUMENTS_SUBMITTED
    doc = db.session.get(VerificationDocument, docs["diploma"].id)
    assert doc.status == "rejected"
    assert doc.rejection_reason == "Illisible"


def test_reschedule_moves_the_single_pending_interview(ctx):
    educator, _ = verified_documents_educator()

    review.schedule_interview(educator.id, "2025-03-01T10:00")
    review.schedule_interview(educator.id, "2025-03-05T14:30", "Reporté à la demande de l'éducateur")

    interviews = VideoInterview.query.filter_by(educator_id=educator.id).all()
    assert len(interviews) == 1
    assert interviews[0].scheduled_at == datetime(2025, 3, 5, 14, 30)
    assert educator.interview_scheduled_date == datetime(2025, 3, 5, 14, 30)
    assert educator.admin_notes == "Reporté à la demande de l'éducateur"
    assert educator.status is S.INTERVIEW_SCHEDULED


@pytest.mark.parametrize("reason", [None, "", "   "])
def test_reject_document_requires_a_reason(ctx, reason):
    educator = make_educator()
    docs = upload_all(educator)
    with pytest.raises(ValidationError):
        review.reject_document(docs["criminal_record"].id, reason)
    assert db.session.get(VerificationDocument, docs["criminal_record"].id).status == "pending"
    assert educator.status is S.DOCUMENTS_SUBMITTED
    assert CriminalRecordVerification.query.count() == 0


def test_schedule_requires_a_date(ctx):
    educator, _ = verified_documents_educator()
    with pytest.raises(ValidationError):
        review.schedule_interview(educator.id, "")
    with pytest.raises(ValidationError):
        review.schedule_interview(educator.id, "next tuesday")
    assert educator.status is S.DOCUMENTS_VERIFIED


def test_schedule_requires_verified_documents(ctx):
    educator = make_educator()
    upload_all(educator)
    with pytest.raises(TransitionError):
        review.schedule_interview(educator.id, "2025-03-01T10:00")
    assert VideoInterview.query.count() == 0


def test_approve_educator_requires_an_interview(ctx):
    educator, _ = verified_documents_educator()
    with pytest.raises(TransitionError):
        review.approve_educator(educator.id)
    assert educator.verification_badge is False


def test_reject_educator_after_interview(ctx):
    educator, _ = verified_documents_educator()
    review.schedule_interview(educator.id, "2025-03-01T10:00")

    review.reject_educator(educator.id, "Posture inadaptée")

    assert educator.status is S.REJECTED_INTERVIEW
    assert educator.verification_badge is False
    interview = VideoInterview.query.filter_by(educator_id=educator.id).one()
    assert interview.status == "failed"
    assert interview.failure_reason == "Posture inadaptée"
    with pytest.raises(TransitionError):
        review.approve_educator(educator.id)


def test_double_approval_is_idempotent(ctx):
    educator = make_educator()
    docs = upload_all(educator)
    review.approve_document(docs["criminal_record"].id)
    first = db.session.get(VerificationDocument, docs["criminal_record"].id).verified_at
    review.approve_document(docs["criminal_record"].id)

    assert db.session.get(VerificationDocument, docs["criminal_record"].id).verified_at == first
    assert CriminalRecordVerification.query.filter_by(educator_id=educator.id, is_clean=True).count() == 1


def test_recompute_failure_keeps_the_decision_and_can_be_retried(ctx, monkeypatch):
    educator = make_educator()
    docs = upload_all(educator)
    approve_all({k: v for k, v in docs.items() if k != "insurance"})

    def boom(_educator):
        raise RuntimeError("database went away")

    monkeypatch.setattr(documents, "recompute_status", boom)
    with pytest.raises(RecomputeError):
        review.approve_document(docs["insurance"].id)
    assert db.session.get(VerificationDocument, docs["insurance"].id).status == "approved"
    assert educator.status is S.DOCUMENTS_SUBMITTED

    monkeypatch.undo()
    review.recompute(educator.id)
    assert educator.status is S.DOCUMENTS_VERIFIED


def test_rejection_is_mailed_even_when_the_recompute_fails(ctx, monkeypatch):
    educator, docs = verified_documents_educator()

    def boom(_educator):
        raise RuntimeError("database went away")

    monkeypatch.setattr(documents, "recompute_status", boom)
    with pytest.raises(RecomputeError):
        review.reject_document(docs["insurance"].id, "Attestation expirée")

    assert db.session.get(VerificationDocument, docs["insurance"].id).status == "rejected"
    notification = Notification.query.filter_by(type="document_rejected").one()
    assert notification.sent_to == "edu@example.com"


def test_save_admin_notes_does_not_change_status(ctx):
    educator = make_educator()
    upload_all(educator)
    review.save_admin_notes(educator.id, "Appeler lundi", "2025-04-02T09:15")
    assert educator.admin_notes == "Appeler lundi"
    assert educator.interview_scheduled_date == datetime(2025, 4, 2, 9, 15)
    assert educator.status is S.DOCUMENTS_SUBMITTED


def test_list_pending_educators_defaults_to_review_queue(ctx):
    waiting = make_educator("waiting@example.com")
    upload_all(waiting)
    make_educator("new@example.com")
    done, _ = verified_documents_educator(email="done@example.com")

    items = review.list_pending_educators()
    by_id = {i["id"]: i for i in items}
    assert set(by_id) == {waiting.id, done.id}
    assert by_id[waiting.id]["documents_count"] == 4
    assert by_id[done.id]["status_label"] == "Documents vérifiés"

    assert [i["id"] for i in review.list_pending_educators("pending_documents")] != []
    with pytest.raises(ValidationError):
        review.list_pending_educators("archived")


def test_decisions_are_mailed_to_the_educator(ctx, monkeypatch):
    sent = []

    def fake_send_mail(to_email, subject, html, cc=None, attachments=None):
        sent.append({"to": to_email, "subject": subject, "html": html, "attachments": attachments or []})
        return 202, "msg-1"

    monkeypatch.setattr("neurocare.jobs.notify.send_mail", fake_send_mail)
    educator, docs = verified_documents_educator()

    review.schedule_interview(educator.id, "2025-03-01T10:00", "Lien visio envoyé la veille")
    invite = sent[-1]
    assert invite["to"] == "edu@example.com"
    filename, data, mimetype = invite["attachments"][0]
    assert filename.endswith(".ics") and mimetype == "text/calendar"
    assert b"DTSTART:20250301T090000Z" in data

    review.reject_document(docs["insurance"].id, "Attestation expirée")
    assert "Attestation expirée" in sent[-1]["html"]

    kinds = [n.type for n in Notification.query.order_by(Notification.id)]
    assert kinds == ["interview_scheduled", "document_rejected"]
    assert Notification.query.first().provider_message_id == "msg-1"
