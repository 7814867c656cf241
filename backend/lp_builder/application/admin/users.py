import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from lp_builder.application.usage import get_user_usage
from lp_builder.clients import storage
from lp_builder.errors import BadRequest
from lp_builder.extensions import db
from lp_builder.models.base import utcnow
from lp_builder.models.subscription import Subscription
from lp_builder.models.user_settings import UserSettings

logger = logging.getLogger(__name__)

BAN_ACTIONS = {"ban", "unban"}


def _timestamp(value) -> float:
    if isinstance(value, datetime):
        return value.timestamp()
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).timestamp()
    return 0.0


def list_users() -> List[Dict[str, Any]]:
    """
    Supabase auth users merged with their settings, subscription and usage.

    Banned users sort last, then newest first.
    """
    auth_users = storage.list_auth_users()

    settings_map = {s.user_id: s for s in UserSettings.query.all()}
    subscription_map = {s.user_id: s for s in Subscription.query.all()}

    rows = []
    for user in auth_users:
        settings: Optional[UserSettings] = settings_map.get(user["id"])
        subscription: Optional[Subscription] = subscription_map.get(user["id"])

        rows.append({
            "user": user,
            "settings": settings,
            "subscription": subscription,
            "usage": get_user_usage(user["id"]),
        })

    rows.sort(key=lambda r: (
        bool(r["settings"] and r["settings"].is_banned),
        -_timestamp(r["user"]["created_at"]),
    ))
    return rows


def set_ban(*, user_id: str, action: str, reason: Optional[str], admin_id: str) -> UserSettings:
    if not user_id or action not in BAN_ACTIONS:
        raise BadRequest("Invalid request")

    banned = action == "ban"
    settings = UserSettings.query.filter_by(user_id=user_id).first()
    if settings is None:
        settings = UserSettings(user_id=user_id)
        db.session.add(settings)

    settings.is_banned = banned
    settings.banned_at = utcnow() if banned else None
    settings.banned_by = admin_id if banned else None
    settings.ban_reason = (reason or None) if banned else None
    db.session.commit()

    logger.info("User %s %sned by %s", user_id, action, admin_id)
    return settings
