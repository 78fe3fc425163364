from ..extensions import db
from .base import TimestampMixin

class FamilyProfile(db.Model, TimestampMixin):
    __tablename__ = "family_profiles"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, unique=True)
    first_name = db.Column(db.String(120), nullable=False)
    last_name = db.Column(db.String(120), nullable=False)
    phone = db.Column(db.String(40))
    location = db.Column(db.String(200))

    user = db.relationship("User", back_populates="family_profile")
