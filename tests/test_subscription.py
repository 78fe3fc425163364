from datetime import datetime, timedelta

from neurocare.extensions import db
from neurocare.models.subscription import Subscription
from neurocare.services.subscription import (
    can_create_booking,
    can_create_conversation,
    get_active_subscription,
)

from factories import make_educator


def subscribe(educator, status, days=30):
    db.session.add(Subscription(educator_id=educator.id, status=status,
                                provider_subscription_id=f"sub_{educator.id}_{status}",
                                current_period_end=datetime.utcnow() + timedelta(days=days)))
    db.session.commit()


def test_free_tier_is_limited(ctx):
    educator = make_educator()
    assert get_active_subscription(educator.id) is None
    assert can_create_conversation(educator.id, 2) == {"can_create": True, "reason": None, "current": 2, "limit": 3}
    gate = can_create_booking(educator.id, 3)
    assert gate["can_create"] is False
    assert gate["limit"] == 3
    assert "3 réservations" in gate["reason"]


def test_active_subscription_is_unlimited(ctx):
    educator = make_educator()
    subscribe(educator, "trialing")
    assert get_active_subscription(educator.id) == "trialing"
    assert can_create_conversation(educator.id, 50) == {"can_create": True, "reason": None, "current": 50, "limit": None}


def test_canceled_or_expired_subscriptions_do_not_count(ctx):
    educator = make_educator()
    subscribe(educator, "canceled")
    subscribe(educator, "active", days=-1)
    assert get_active_subscription(educator.id) is None
    assert can_create_booking(educator.id, 3)["can_create"] is False


def test_unlimited_free_tier(ctx):
    ctx.config["FREE_MAX_ACTIVE_CONVERSATIONS"] = None
    educator = make_educator()
    assert can_create_conversation(educator.id, 999)["can_create"] is True
