import logging
from datetime import timedelta
from typing import List

from sqlalchemy.exc import SQLAlchemyError

from lp_builder.domain.plans import PLANS
from lp_builder.extensions import db
from lp_builder.models.base import utcnow
from lp_builder.models.subscription import STATUS_ACTIVE, Subscription
from lp_builder.models.user_settings import UserSettings

logger = logging.getLogger(__name__)

TARGET_PLAN = "pro"
MANUAL_GRANT_PERIOD = timedelta(days=365)


def upgrade_free_users() -> List[str]:
    """
    Move every ``free`` user to ``pro``.

    Users without a Subscription get a manual-grant row; the customer id
    placeholder keeps the unique constraint satisfied. Each user commits
    separately so one failure does not block the rest.
    """
    upgraded: List[str] = []
    free_users = UserSettings.query.filter_by(plan="free").all()
    logger.info("Free plan users: %d", len(free_users))

    for settings in free_users:
        label = settings.email or settings.user_id
        try:
            settings.plan = TARGET_PLAN
            subscription = Subscription.query.filter_by(user_id=settings.user_id).first()

            if subscription is None:
                now = utcnow()
                db.session.add(Subscription(
                    user_id=settings.user_id,
                    stripe_customer_id=f"manual_upgrade_{settings.user_id}",
                    stripe_subscription_id=None,
                    stripe_price_id=PLANS[TARGET_PLAN].stripe_price_id,
                    plan=TARGET_PLAN,
                    status=STATUS_ACTIVE,
                    current_period_start=now,
                    current_period_end=now + MANUAL_GRANT_PERIOD,
                    cancel_at_period_end=False,
                ))
                logger.info("%s: subscription created, upgraded to pro", label)
            else:
                subscription.plan = TARGET_PLAN
                subscription.status = STATUS_ACTIVE
                logger.info("%s: subscription updated, upgraded to pro", label)

            db.session.commit()
            upgraded.append(settings.user_id)
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception("%s: upgrade failed", label)

    logger.info("Upgraded %d/%d users to pro", len(upgraded), len(free_users))
    return upgraded
