from datetime import datetime, timedelta, timezone
from uuid import uuid4
from zoneinfo import ZoneInfo

def _escape(text):
    return (text or "").replace("\\", "\\\\").replace(";", "\\;").replace(",", "\\,").replace("\n", "\\n")

def build_ics(uid_domain, title, start, end, location="", description="", tz=None):
    """Build a single-event invite. Naive datetimes are read in ``tz`` (UTC when unset)."""
    uid = f"{uuid4()}@{uid_domain}"
    local = ZoneInfo(tz) if tz else timezone.utc
    def to_dt(dt):
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=local)
        return dt.astimezone(timezone.utc).strftime('%Y%m%dT%H%M%SZ')
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        "PRODID:-//NeuroCare//Entretien de verification//FR",
        "METHOD:REQUEST",
        "BEGIN:VEVENT",
        f"UID:{uid}",
        f"DTSTAMP:{to_dt(datetime.now(timezone.utc))}",
        f"DTSTART:{to_dt(start)}",
        f"DTEND:{to_dt(end)}",
        f"SUMMARY:{_escape(title)}",
        f"LOCATION:{_escape(location)}",
        f"DESCRIPTION:{_escape(description)}",
        "END:VEVENT",
        "END:VCALENDAR",
    ]
    return "\r\n".join(lines)

INTERVIEW_DURATION = timedelta(minutes=45)

def build_interview_ics(uid_domain, interview, notes="", tz="Europe/Paris"):
    """Calendar invite for a verification video interview.

    ``scheduled_at`` is stored naive, in the admins' local time ``tz``.
    """
    return build_ics(uid_domain,
                     "Entretien de vérification NeuroCare",
                     interview.scheduled_at,
                     interview.scheduled_at + INTERVIEW_DURATION,
                     location="Visioconférence",
                     description=notes or "",
                     tz=tz)
