from ..extensions import db
from .base import TimestampMixin

class Notification(db.Model, TimestampMixin):
    __tablename__ = "notifications"
    id = db.Column(db.Integer, primary_key=True)
    educator_id = db.Column(db.Integer, db.ForeignKey("educator_profiles.id"), index=True)
    type = db.Column(db.String(50))  # dreets_request/document_rejected/educator_verified/...
    sent_to = db.Column(db.String(255))
    subject = db.Column(db.String(255))
    provider_message_id = db.Column(db.String(255))
    sent_at = db.Column(db.DateTime)
