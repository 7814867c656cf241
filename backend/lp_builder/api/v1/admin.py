from decimal import Decimal, InvalidOperation

from flask import jsonify, request

from lp_builder.application import credits
from lp_builder.application.admin.stats import generation_stats
from lp_builder.application.admin.users import list_users, set_ban
from lp_builder.errors import BadRequest
from lp_builder.models.credit import CreditBalance
from lp_builder.models.generation_run import GenerationRun
from lp_builder.normalizers._common import iso, money
from lp_builder.normalizers.admin import (
    normalize_admin_user,
    normalize_generation_run,
    normalize_stats,
)
from lp_builder.normalizers.billing import normalize_credit_summary, normalize_transaction
from lp_builder.normalizers.pagination import normalize_pagination
from lp_builder.utils.decorators import auth_required, current_user_id, roles_required
from lp_builder.utils.pagination import paginate_cursor
from . import v1_bp

DEFAULT_STATS_DAYS = 30
MAX_STATS_DAYS = 365
DEFAULT_RUNS_LIMIT = 50
MAX_RUNS_LIMIT = 200


def _int_arg(name, default, maximum):
    raw = request.args.get(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise BadRequest(f"{name} must be an integer")
    if value <= 0:
        raise BadRequest(f"{name} must be greater than zero")
    return min(value, maximum)


@v1_bp.route("/admin/users", methods=["GET"])
@auth_required()
@roles_required("admin")
def admin_list_users():
    return jsonify([normalize_admin_user(row) for row in list_users()])


@v1_bp.route("/admin/users", methods=["DELETE"])
@auth_required()
@roles_required("admin")
def admin_ban_user():
    data = request.get_json(silent=True) or {}
    settings = set_ban(
        user_id=data.get("userId"),
        action=data.get("action"),
        reason=data.get("reason"),
        admin_id=current_user_id(),
    )
    return jsonify({
        "success": True,
        "userId": settings.user_id,
        "isBanned": settings.is_banned,
        "bannedAt": iso(settings.banned_at),
        "banReason": settings.ban_reason,
    })


@v1_bp.route("/admin/credits", methods=["GET"])
@auth_required()
@roles_required("admin")
def admin_get_credits():
    user_id = request.args.get("userId")
    if user_id:
        return jsonify(normalize_credit_summary(credits.credit_summary(user_id)))

    balances = CreditBalance.query.order_by(CreditBalance.balance_usd.desc()).all()
    return jsonify([
        {
            "userId": b.user_id,
            "balanceUsd": money(b.balance_usd),
            "lastRefreshedAt": iso(b.last_refreshed_at),
        }
        for b in balances
    ])


@v1_bp.route("/admin/credits", methods=["POST"])
@auth_required()
@roles_required("admin")
def admin_adjust_credits():
    data = request.get_json(silent=True) or {}
    user_id = data.get("userId")
    amount = data.get("amount")

    if not user_id or amount is None:
        raise BadRequest("userId and amount are required")

    try:
        amount = Decimal(str(amount))
    except InvalidOperation:
        raise BadRequest("amount must be a number")
    if not amount.is_finite():
        raise BadRequest("amount must be a number")

    description = data.get("description") or (
        "Credit granted by admin" if amount >= 0 else "Credit deducted by admin"
    )
    tx = credits.adjust_credit(
        user_id=user_id,
        amount_usd=amount,
        description=description,
        admin_id=current_user_id(),
    )

    return jsonify({
        "success": True,
        "transaction": normalize_transaction(tx),
        "currentBalanceUsd": money(credits.current_balance(user_id)),
    })


@v1_bp.route("/admin/stats", methods=["GET"])
@auth_required()
@roles_required("admin")
def admin_stats():
    days = _int_arg("days", DEFAULT_STATS_DAYS, MAX_STATS_DAYS)
    stats = generation_stats(days=days, user_id=request.args.get("userId"))
    return jsonify(normalize_stats(stats))


@v1_bp.route("/admin/generation-runs", methods=["GET"])
@auth_required()
@roles_required("admin")
def admin_generation_runs():
    limit = _int_arg("limit", DEFAULT_RUNS_LIMIT, MAX_RUNS_LIMIT)

    query = GenerationRun.query
    for arg, column in (("userId", GenerationRun.user_id),
                        ("type", GenerationRun.type),
                        ("status", GenerationRun.status)):
        value = request.args.get(arg)
        if value:
            query = query.filter(column == value)

    runs, cursor = paginate_cursor(
        query,
        model=GenerationRun,
        cursor=request.args.get("cursor"),
        limit=limit,
    )
    return jsonify(normalize_pagination(runs, normalize_generation_run, cursor=cursor))
