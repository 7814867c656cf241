import logging
from typing import Any, Optional

from lp_builder.domain.plans import PLANS
from lp_builder.errors import BadRequest, Conflict
from lp_builder.extensions import db
from lp_builder.models.upgrade_request import (
    REVIEW_STATUSES,
    STATUS_APPROVED,
    STATUS_PENDING,
    UpgradeRequest,
)
from lp_builder.models.user_settings import UserSettings
from lp_builder.utils.transaction import transactional

logger = logging.getLogger(__name__)


def _optional_text(value: Any, name: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise BadRequest(f"{name} must be a string")
    return value.strip() or None


def request_upgrade(
    *,
    settings: UserSettings,
    desired_plan: Any,
    reason: Any = None,
    company_name: Any = None,
) -> UpgradeRequest:
    """
    File a plan change request for admin review.

    A user holds at most one pending request at a time.
    """
    if not isinstance(desired_plan, str) or desired_plan not in PLANS:
        raise BadRequest("Please choose a valid plan")

    current_plan = settings.plan or "free"
    if current_plan == desired_plan:
        raise BadRequest("Already on this plan")

    pending = UpgradeRequest.query.filter_by(user_id=settings.user_id, status=STATUS_PENDING).first()
    if pending is not None:
        raise Conflict("An upgrade request is already pending review")

    upgrade = UpgradeRequest(
        user_id=settings.user_id,
        email=settings.email,
        current_plan=current_plan,
        desired_plan=desired_plan,
        reason=_optional_text(reason, "reason"),
        company_name=_optional_text(company_name, "companyName"),
        status=STATUS_PENDING,
    )

    with transactional():
        db.session.add(upgrade)

    logger.info("Upgrade %s -> %s requested by %s", current_plan, desired_plan, settings.user_id)
    return upgrade


def review_upgrade(
    *,
    upgrade: UpgradeRequest,
    status: Any,
    reviewer_id: str,
    review_note: Any = None,
) -> UpgradeRequest:
    """Approve or reject a pending request; approval moves the user to the desired plan."""
    if not isinstance(status, str) or status not in REVIEW_STATUSES:
        raise BadRequest("status must be approved or rejected")
    if upgrade.status != STATUS_PENDING:
        raise BadRequest("This request has already been reviewed")

    with transactional():
        upgrade.status = status
        upgrade.reviewed_by = reviewer_id
        upgrade.review_note = _optional_text(review_note, "reviewNote")

        if status == STATUS_APPROVED:
            settings = UserSettings.query.filter_by(user_id=upgrade.user_id).first()
            if settings is None:
                settings = UserSettings(user_id=upgrade.user_id, email=upgrade.email)
                db.session.add(settings)
            settings.plan = upgrade.desired_plan

    logger.info("Upgrade request %s %s by %s", upgrade.id, status, reviewer_id)
    return upgrade
