from datetime import datetime, timezone
from types import SimpleNamespace

from neurocare.services.ics import build_ics, build_interview_ics


def fields(ics):
    return dict(line.split(":", 1) for line in ics.split("\r\n") if ":" in line)


def test_interview_times_are_read_in_paris_time():
    winter = fields(build_interview_ics("neuro-care.fr", SimpleNamespace(scheduled_at=datetime(2025, 3, 1, 10, 0))))
    assert winter["DTSTART"] == "20250301T090000Z"
    assert winter["DTEND"] == "20250301T094500Z"

    summer = fields(build_interview_ics("neuro-care.fr", SimpleNamespace(scheduled_at=datetime(2025, 7, 1, 10, 0))))
    assert summer["DTSTART"] == "20250701T080000Z"


def test_aware_datetimes_and_missing_zone():
    aware = fields(build_ics("x", "t", datetime(2025, 3, 1, 10, 0, tzinfo=timezone.utc),
                             datetime(2025, 3, 1, 11, 0, tzinfo=timezone.utc), tz="Europe/Paris"))
    assert aware["DTSTART"] == "20250301T100000Z"
    naive = fields(build_ics("x", "t", datetime(2025, 3, 1, 10, 0), datetime(2025, 3, 1, 11, 0)))
    assert naive["DTSTART"] == "20250301T100000Z"


def test_text_fields_are_escaped():
    ics = build_ics("neuro-care.fr", "Entretien; visio", datetime(2025, 3, 1, 10, 0), datetime(2025, 3, 1, 11, 0),
                    description="Lien, code\nà 10h")
    assert r"SUMMARY:Entretien\; visio" in ics
    assert "DESCRIPTION:Lien\\, code\\nà 10h" in ics
    assert fields(ics)["UID"].endswith("@neuro-care.fr")
