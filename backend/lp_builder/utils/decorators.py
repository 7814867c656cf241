from functools import wraps

from flask import g
from flask_jwt_extended import get_jwt, get_jwt_identity, jwt_required
from sqlalchemy.exc import IntegrityError

from lp_builder.errors import Forbidden, Unauthorized
from lp_builder.extensions import db
from lp_builder.models.user_settings import UserSettings


def current_user_settings():
    """
    Return the caller's UserSettings row, creating it on first sight.

    Returns None when the request carries no identity (optional auth).
    """
    user_id = get_jwt_identity()
    if not user_id:
        return None

    cached = g.get("user_settings")
    if cached is not None and cached.user_id == user_id:
        return cached

    email = get_jwt().get("email")
    settings = UserSettings.query.filter_by(user_id=user_id).first()

    if settings is None:
        settings = UserSettings(user_id=user_id, email=email)
        db.session.add(settings)
        try:
            db.session.commit()
        except IntegrityError:
            # A concurrent request created the row first
            db.session.rollback()
            settings = UserSettings.query.filter_by(user_id=user_id).one()
    elif email and settings.email != email:
        settings.email = email
        db.session.commit()

    g.user_settings = settings
    return settings


def current_user_id():
    settings = current_user_settings()
    return settings.user_id if settings else None


def auth_required(optional=False, allow_banned=False):
    """Validate the Supabase access token and reject banned accounts."""
    def decorator(fn):
        @wraps(fn)
        @jwt_required(optional=optional)
        def wrapper(*args, **kwargs):
            settings = current_user_settings()

            if settings is None and not optional:
                raise Unauthorized()
            if settings is not None and settings.is_banned and not allow_banned:
                raise Forbidden("Account suspended")

            return fn(*args, **kwargs)
        return wrapper
    return decorator


def roles_required(*allowed_roles):
    """Must be stacked below ``auth_required``."""
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            settings = current_user_settings()

            if settings is None or settings.role not in allowed_roles:
                raise Forbidden("Insufficient permissions")

            return fn(*args, **kwargs)
        return wrapper
    return decorator
