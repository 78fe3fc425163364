from io import BytesIO
from flask import current_app, jsonify, request, send_file
from . import bp
from .forms import RejectForm, ScheduleInterviewForm, AdminNotesForm, DiplomaReviewForm
from ...models.criminal_record_verification import CriminalRecordVerification
from ...models.video_interview import VideoInterview
from ...services import diploma as diploma_service
from ...services import documents as document_service
from ...services import review
from ...services.errors import ValidationError
from ...services.ics import build_interview_ics
from ...services.storage import get_signed_url
from ...services.verification import load_educator
from ...utils.decorators import check_role

@bp.before_request
def _admin_only():
    check_role("admin")

def _form_error(form):
    # first message of the first failing field, e.g. "A rejection reason is required"
    message = next(iter(form.errors.values()))[0] if form.errors else "Invalid form"
    raise ValidationError(message, details={"fields": form.errors})

# --- educators -----------------------------------------------------------

@bp.get("/educators")
def educators_index():
    return jsonify({"items": review.list_pending_educators(request.args.get("status") or None)})

@bp.get("/educators/<int:educator_id>")
def educator_detail(educator_id):
    educator = load_educator(educator_id)
    data = educator.to_dict()
    data["status_label"] = educator.status.label
    data["diploma"] = educator.diploma_dict()
    if educator.diploma_url:
        data["diploma"]["diploma_signed_url"] = get_signed_url(educator.diploma_url)
    data["documents"] = document_service.documents_with_urls(educator.id)
    data["interviews"] = [i.to_dict() for i in educator.interviews.order_by(VideoInterview.id)]
    data["criminal_record_checks"] = [
        {"is_clean": c.is_clean, "notes": c.notes, "verified_at": c.verified_at.isoformat()}
        for c in CriminalRecordVerification.query.filter_by(educator_id=educator.id)
        .order_by(CriminalRecordVerification.id)
    ]
    data["diploma_history"] = diploma_service.diploma_history(educator.id)
    return jsonify(data)

@bp.post("/educators/<int:educator_id>/notes")
def save_notes(educator_id):
    form = AdminNotesForm()
    if not form.validate_on_submit():
        _form_error(form)
    educator = review.save_admin_notes(educator_id, form.notes.data, form.interview_date.data)
    return jsonify(educator.to_dict())

@bp.post("/educators/<int:educator_id>/schedule-interview")
def schedule_interview(educator_id):
    form = ScheduleInterviewForm()
    if not form.validate_on_submit():
        _form_error(form)
    interview = review.schedule_interview(educator_id, form.interview_date.data, form.notes.data)
    return jsonify({"interview": interview.to_dict(), "educator": interview.educator.to_dict()})

@bp.get("/educators/<int:educator_id>/interview.ics")
def interview_ics(educator_id):
    educator = load_educator(educator_id)
    interview = review.pending_interview(educator.id)
    if interview is None or interview.scheduled_at is None:
        return jsonify({"error": {"error_code": "RESOURCE_NOT_FOUND", "message": "No interview scheduled"}}), 404
    ics = build_interview_ics(current_app.config["UID_DOMAIN"], interview, educator.admin_notes,
                              tz=current_app.config["INTERVIEW_TIMEZONE"])
    return send_file(BytesIO(ics.encode("utf-8")), as_attachment=True,
                     download_name=f"entretien_{interview.id}.ics", mimetype="text/calendar")

@bp.post("/educators/<int:educator_id>/approve")
def approve_educator(educator_id):
    return jsonify(review.approve_educator(educator_id).to_dict())

@bp.post("/educators/<int:educator_id>/reject")
def reject_educator(educator_id):
    form = RejectForm()
    if not form.validate_on_submit():
        _form_error(form)
    return jsonify(review.reject_educator(educator_id, form.reason.data).to_dict())

@bp.post("/educators/<int:educator_id>/recompute")
def recompute(educator_id):
    return jsonify(review.recompute(educator_id).to_dict())

# --- documents -----------------------------------------------------------

@bp.post("/documents/<int:document_id>/approve")
def approve_document(document_id):
    doc = review.approve_document(document_id)
    return jsonify({"document": doc.to_dict(), "verification_status": load_educator(doc.educator_id).verification_status})

@bp.post("/documents/<int:document_id>/reject")
def reject_document(document_id):
    form = RejectForm()
    if not form.validate_on_submit():
        _form_error(form)
    doc = review.reject_document(document_id, form.reason.data)
    return jsonify({"document": doc.to_dict(), "verification_status": load_educator(doc.educator_id).verification_status})

@bp.delete("/documents/<int:document_id>")
def delete_document(document_id):
    document_service.delete_document(document_id)
    return jsonify({"deleted": document_id})

# --- diplomas ------------------------------------------------------------

@bp.get("/diplomas")
def diplomas_index():
    status_filter = request.args.get("filter", "pending")
    return jsonify({"items": diploma_service.list_diplomas(status_filter), "stats": diploma_service.diploma_stats()})

@bp.post("/diplomas/<int:educator_id>/review")
def review_diploma(educator_id):
    form = DiplomaReviewForm()
    if not form.validate_on_submit():
        _form_error(form)
    educator = diploma_service.review_diploma(educator_id, form.status.data, form.reason.data)
    return jsonify(educator.diploma_dict())

@bp.post("/diplomas/<int:educator_id>/dreets-responded")
def dreets_responded(educator_id):
    educator = diploma_service.mark_regulator_responded(educator_id)
    return jsonify(educator.diploma_dict())
