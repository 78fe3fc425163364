"""Free-tier limits for educators without an active subscription.

Subscriptions are written by the billing sync; this module only reads them.
"""
from datetime import datetime

from flask import current_app

from ..models.subscription import ACTIVE_STATUSES, Subscription


def get_active_subscription(educator_id):
    """Status of the educator's active subscription, or None."""
    sub = (
        Subscription.query
        .filter(Subscription.educator_id == educator_id, Subscription.status.in_(ACTIVE_STATUSES))
        .order_by(Subscription.current_period_end.desc())
        .first()
    )
    if sub is None:
        return None
    if sub.current_period_end and sub.current_period_end < datetime.utcnow():
        return None
    return sub.status


def _gate(educator_id, active_count, limit_key, what):
    if get_active_subscription(educator_id):
        return {'can_create': True, 'reason': None, 'current': active_count, 'limit': None}
    limit = current_app.config.get(limit_key)
    if limit is None or active_count < limit:
        return {'can_create': True, 'reason': None, 'current': active_count, 'limit': limit}
    return {
        'can_create': False,
        'reason': f"Limite de {limit} {what} actives atteinte sans abonnement",
        'current': active_count,
        'limit': limit,
    }


def can_create_conversation(educator_id, active_count):
    return _gate(educator_id, active_count, 'FREE_MAX_ACTIVE_CONVERSATIONS', 'conversations')


def can_create_booking(educator_id, active_count):
    return _gate(educator_id, active_count, 'FREE_MAX_ACTIVE_BOOKINGS', 'réservations')
