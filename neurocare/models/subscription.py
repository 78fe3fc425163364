from ..extensions import db
from .base import EducatorScopedMixin, TimestampMixin

ACTIVE_STATUSES = ("active", "trialing")

class Subscription(db.Model, EducatorScopedMixin, TimestampMixin):
    """Mirror of the payment provider's subscription, written by the billing sync."""
    __tablename__ = "subscriptions"

    id = db.Column(db.Integer, primary_key=True)
    # EducatorScopedMixin: educator_id
    provider_subscription_id = db.Column(db.String(255), unique=True)
    status = db.Column(db.String(30), nullable=False)  # active/trialing/past_due/canceled/incomplete
    current_period_end = db.Column(db.DateTime)
