from flask import jsonify, request

from lp_builder.application import credits
from lp_builder.application.usage import usage_report
from lp_builder.errors import BadRequest
from lp_builder.extensions import db
from lp_builder.normalizers.billing import (
    normalize_credit_summary,
    normalize_subscription,
    normalize_usage_report,
)
from lp_builder.utils.decorators import auth_required, current_user_settings
from lp_builder.utils.encryption import encrypt
from . import v1_bp


@v1_bp.route("/user/settings", methods=["GET"])
@auth_required()
def get_user_settings():
    settings = current_user_settings()
    return jsonify({
        "plan": settings.plan,
        "role": settings.role,
        "hasApiKey": bool(settings.google_api_key),
        "email": settings.email,
    })


@v1_bp.route("/user/settings", methods=["POST"])
@auth_required()
def save_user_settings():
    settings = current_user_settings()
    data = request.get_json(silent=True) or {}

    if "googleApiKey" in data:
        api_key = data["googleApiKey"]
        if api_key is None:
            settings.google_api_key = None
        elif not isinstance(api_key, str):
            raise BadRequest("googleApiKey must be a string")
        elif api_key.strip():
            settings.google_api_key = encrypt(api_key.strip())

    db.session.commit()
    return jsonify({"success": True, "hasApiKey": bool(settings.google_api_key)})


@v1_bp.route("/user/status", methods=["GET"])
@auth_required(allow_banned=True)
def get_user_status():
    settings = current_user_settings()
    balance = credits.get_or_create_balance(settings.user_id)

    return jsonify({
        "userId": settings.user_id,
        "isBanned": settings.is_banned,
        "banReason": settings.ban_reason if settings.is_banned else None,
        "plan": settings.plan,
        "role": settings.role,
        "hasActiveSubscription": settings.plan != "free",
        "creditBalanceUsd": float(balance.balance_usd or 0),
    })


@v1_bp.route("/user/credits", methods=["GET"])
@auth_required()
def get_user_credits():
    settings = current_user_settings()
    summary = credits.credit_summary(settings.user_id)
    subscription = credits.get_subscription(settings.user_id)

    body = normalize_credit_summary(summary)
    body["plan"] = settings.plan
    body["subscription"] = normalize_subscription(subscription)
    return jsonify(body)


@v1_bp.route("/user/usage", methods=["GET"])
@auth_required()
def get_usage():
    settings = current_user_settings()
    return jsonify(normalize_usage_report(usage_report(settings.user_id)))
