from io import BytesIO

import pytest

from neurocare.extensions import db
from neurocare.models.educator import EducatorProfile

from factories import PASSWORD, PDF_BYTES, PNG_BYTES, make_admin, make_educator

ADMIN = "admin@neuro-care.fr"
EDUCATOR = "camille@neuro-care.fr"


def login(client, email, password=PASSWORD):
    return client.post("/auth/login", data={"email": email, "password": password})


def upload(client, document_type, name="doc.pdf", data=PDF_BYTES):
    return client.post(f"/verification/documents/{document_type}",
                       data={"file": (BytesIO(data), name)}, content_type="multipart/form-data")


@pytest.fixture
def admin_client(app):
    with app.app_context():
        make_admin(ADMIN)
    c = app.test_client()
    assert login(c, ADMIN).status_code == 200
    return c


@pytest.fixture
def educator_client(app):
    c = app.test_client()
    r = c.post("/auth/register/educator", data={
        "email": EDUCATOR, "password": PASSWORD, "first_name": "Camille", "last_name": "Martin",
        "profession_type": "educator",
    })
    assert r.status_code == 201
    return c


def educator_id(app):
    with app.app_context():
        return EducatorProfile.query.one().id


def document_ids(admin_client, eid):
    detail = admin_client.get(f"/admin/educators/{eid}").get_json()
    return {d["document_type"]: d["id"] for d in detail["documents"]}


def test_registered_educator_starts_hidden(educator_client):
    me = educator_client.get("/auth/me").get_json()
    assert me["role"] == "educator"
    assert me["educator"]["verification_status"] == "pending_documents"
    assert me["educator"]["verification_badge"] is False
    assert me["educator"]["profile_visible"] is False

    overview = educator_client.get("/verification").get_json()
    assert [d["document_type"] for d in overview["documents"]] == ["diploma", "criminal_record", "id_card", "insurance"]
    assert all(d["status"] is None for d in overview["documents"])


def test_duplicate_registration_is_rejected(app, educator_client):
    r = app.test_client().post("/auth/register/family", data={
        "email": EDUCATOR, "password": PASSWORD, "first_name": "Paul", "last_name": "Roux",
    })
    assert r.status_code == 400
    assert r.get_json()["error"]["details"] == {"field": "email"}


def test_bad_credentials(app, educator_client):
    assert login(app.test_client(), EDUCATOR, "wrong-password").status_code == 401


def test_admin_surface_requires_an_admin(client, educator_client):
    r = client.get("/admin/educators")
    assert r.status_code == 401
    assert r.get_json()["error"]["error_code"] == "UNAUTHORIZED"
    assert educator_client.get("/admin/educators").status_code == 403
    assert educator_client.post("/admin/documents/1/approve").status_code == 403


def test_verification_surface_is_for_educators(admin_client):
    assert admin_client.get("/verification").status_code == 403


def test_full_review_over_http(app, admin_client, educator_client):
    for t in ("diploma", "criminal_record", "id_card", "insurance"):
        assert upload(educator_client, t).status_code == 201
    eid = educator_id(app)

    queue = admin_client.get("/admin/educators").get_json()["items"]
    assert [(e["id"], e["documents_count"], e["verification_status"]) for e in queue] == \
        [(eid, 4, "documents_submitted")]

    ids = document_ids(admin_client, eid)
    r = admin_client.post(f"/admin/documents/{ids['insurance']}/reject", data={"reason": "  "})
    assert r.status_code == 400
    assert r.get_json()["error"]["message"] == "A rejection reason is required"

    for doc_id in ids.values():
        r = admin_client.post(f"/admin/documents/{doc_id}/approve")
        assert r.status_code == 200
    assert r.get_json()["verification_status"] == "documents_verified"

    r = admin_client.post(f"/admin/educators/{eid}/schedule-interview",
                          data={"interview_date": "2025-03-01T10:00", "notes": "Visio"})
    assert r.status_code == 200
    assert r.get_json()["educator"]["verification_status"] == "interview_scheduled"

    ics = admin_client.get(f"/admin/educators/{eid}/interview.ics")
    assert ics.status_code == 200
    assert ics.mimetype == "text/calendar"
    assert b"BEGIN:VCALENDAR" in ics.data

    assert app.test_client().get("/educators").get_json()["items"] == []
    r = admin_client.post(f"/admin/educators/{eid}/approve")
    assert r.get_json()["verification_status"] == "verified"
    assert r.get_json()["verification_badge"] is True

    public = app.test_client().get("/educators").get_json()["items"]
    assert [e["id"] for e in public] == [eid]


def test_schedule_before_documents_are_verified_conflicts(app, admin_client, educator_client):
    upload(educator_client, "diploma")
    eid = educator_id(app)
    r = admin_client.post(f"/admin/educators/{eid}/schedule-interview", data={"interview_date": "2025-03-01T10:00"})
    assert r.status_code == 409
    assert r.get_json()["error"]["error_code"] == "INVALID_TRANSITION"

    r = admin_client.post(f"/admin/educators/{eid}/schedule-interview", data={})
    assert r.status_code == 400


def test_upload_validation(educator_client):
    assert upload(educator_client, "diploma", name="cv.docx").status_code == 400
    r = upload(educator_client, "passport")
    assert r.status_code == 400
    assert r.get_json()["error"]["error_code"] == "VALIDATION_ERROR"


def test_missing_resources_are_404(admin_client):
    r = admin_client.post("/admin/documents/999/approve")
    assert r.status_code == 404
    assert r.get_json()["error"]["details"] == {"resource_type": "VerificationDocument", "id": 999}
    assert admin_client.get("/admin/educators/999").status_code == 404


def test_signed_file_download(app, educator_client):
    upload(educator_client, "id_card", name="cni.png", data=PNG_BYTES)
    doc = educator_client.get("/verification").get_json()["documents"][2]
    token = doc["url"].split("/files/", 1)[1]

    r = app.test_client().get(f"/files/{token}")
    assert r.status_code == 200
    assert r.data == PNG_BYTES
    assert app.test_client().get(f"/files/{token[:-2]}xx").status_code == 404


def test_educators_cannot_read_each_others_documents(app, educator_client):
    upload(educator_client, "id_card")
    with app.app_context():
        make_educator("other@neuro-care.fr")
    other = app.test_client()
    login(other, "other@neuro-care.fr")
    doc_id = educator_client.get("/verification").get_json()["documents"][2]["id"]
    assert other.get(f"/verification/documents/{doc_id}/url").status_code == 403
    assert educator_client.get(f"/verification/documents/{doc_id}/url").status_code == 200


def test_diploma_flow_over_http(app, admin_client, educator_client):
    r = educator_client.post("/verification/diploma", data={"file": (BytesIO(PNG_BYTES), "diplome.png")},
                             content_type="multipart/form-data")
    assert r.status_code == 400
    assert r.get_json()["error"]["details"] == {"field": "region"}

    r = educator_client.post("/verification/diploma",
                             data={"file": (BytesIO(PNG_BYTES), "diplome.png"), "region": "Bretagne"},
                             content_type="multipart/form-data")
    assert r.status_code == 201
    body = r.get_json()
    assert body["dreets_dispatched"] is True
    assert body["diploma"]["diploma_verification_status"] == "pending"
    eid = educator_id(app)

    listing = admin_client.get("/admin/diplomas").get_json()
    assert [d["id"] for d in listing["items"]] == [eid]
    assert listing["stats"]["pending"] == 1

    r = admin_client.post(f"/admin/diplomas/{eid}/review", data={"status": "rejected"})
    assert r.status_code == 400
    r = admin_client.post(f"/admin/diplomas/{eid}/dreets-responded")
    assert r.get_json()["dreets_verified"] is True
    r = admin_client.post(f"/admin/diplomas/{eid}/review", data={"status": "verified"})
    assert r.get_json()["diploma_verification_status"] == "verified"

    with app.app_context():
        educator = db.session.get(EducatorProfile, eid)
        assert educator.verification_badge is False
        assert educator.verification_status == "pending_documents"


def test_analyze_preview_without_ocr_key(educator_client):
    r = educator_client.post("/verification/diploma/analyze", data={"file": (BytesIO(PNG_BYTES), "d.png")},
                             content_type="multipart/form-data")
    assert r.status_code == 200
    assert r.get_json()["success"] is False
