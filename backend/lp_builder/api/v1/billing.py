from flask import current_app, jsonify, request

from lp_builder.application import billing, credits
from lp_builder.domain.plans import CREDIT_PACKAGES, credit_package_for_plan, get_plan
from lp_builder.errors import BadRequest, Unauthorized
from lp_builder.models.subscription import STATUS_ACTIVE
from lp_builder.normalizers.billing import normalize_package, normalize_subscription
from lp_builder.utils.decorators import auth_required, current_user_settings
from . import v1_bp


def _require_email(settings):
    if not settings.email:
        raise Unauthorized("An email address is required for billing")
    return settings.email


@v1_bp.route("/billing/checkout", methods=["POST"])
def plan_checkout():
    data = request.get_json(silent=True) or {}
    url = billing.create_plan_checkout(data.get("planId"))
    return jsonify({"url": url})


@v1_bp.route("/billing/subscription/create", methods=["POST"])
@auth_required()
def create_subscription():
    settings = current_user_settings()
    email = _require_email(settings)
    data = request.get_json(silent=True) or {}

    existing = credits.get_subscription(settings.user_id)
    if existing and existing.status == STATUS_ACTIVE and existing.stripe_subscription_id:
        raise BadRequest("Already has active subscription")

    url = billing.create_subscription_checkout(
        user_id=settings.user_id,
        email=email,
        plan_id=data.get("planId"),
        customer_id=existing.stripe_customer_id if existing else None,
    )
    return jsonify({"url": url})


@v1_bp.route("/billing/credits/purchase", methods=["GET"])
def list_credit_packages():
    return jsonify({"packages": [normalize_package(p) for p in CREDIT_PACKAGES]})


@v1_bp.route("/billing/credits/purchase", methods=["POST"])
@auth_required()
def purchase_credits():
    settings = current_user_settings()
    email = _require_email(settings)
    data = request.get_json(silent=True) or {}

    package_id = data.get("packageId")
    if package_id not in {p.id for p in CREDIT_PACKAGES}:
        raise BadRequest("Invalid package")

    allowed = credit_package_for_plan(settings.plan)
    if allowed is None or allowed.id != package_id:
        raise BadRequest("This package cannot be purchased on your current plan")

    subscription = credits.get_subscription(settings.user_id)
    url = billing.create_credit_checkout(
        user_id=settings.user_id,
        email=email,
        package_id=package_id,
        customer_id=subscription.stripe_customer_id if subscription else None,
    )
    return jsonify({"url": url})


@v1_bp.route("/billing/portal", methods=["POST"])
@auth_required()
def billing_portal():
    settings = current_user_settings()
    subscription = credits.get_subscription(settings.user_id)

    customer_id = subscription.stripe_customer_id if subscription else None
    if not customer_id or customer_id.startswith("manual_upgrade_"):
        raise BadRequest("No Stripe customer found")

    data = request.get_json(silent=True) or {}
    url = billing.create_portal_session(customer_id, data.get("returnUrl"))
    return jsonify({"url": url})


@v1_bp.route("/billing/subscription", methods=["GET"])
@auth_required()
def get_subscription():
    settings = current_user_settings()
    subscription = credits.get_subscription(settings.user_id)

    if subscription is None:
        return jsonify({"hasSubscription": False, "subscription": None, "stripeDetails": None})

    details = None
    if subscription.stripe_subscription_id:
        remote = billing.subscription_details(subscription.stripe_subscription_id)
        if remote is not None:
            details = {
                "status": remote.get("status"),
                "cancelAtPeriodEnd": remote.get("cancel_at_period_end"),
                "currentPeriodEnd": remote.get("current_period_end"),
            }

    return jsonify({
        "hasSubscription": True,
        "subscription": normalize_subscription(subscription),
        "planName": get_plan(subscription.plan).name,
        "stripeDetails": details,
    })


def _active_subscription(settings):
    subscription = credits.get_subscription(settings.user_id)
    if subscription is None or not subscription.stripe_subscription_id:
        raise BadRequest("No active subscription")
    return subscription


@v1_bp.route("/billing/subscription/cancel", methods=["POST"])
@auth_required()
def cancel_subscription():
    settings = current_user_settings()
    subscription = _active_subscription(settings)

    billing.cancel_subscription(subscription.stripe_subscription_id, at_period_end=True)
    subscription = credits.update_subscription(settings.user_id, cancel_at_period_end=True)

    current_app.logger.info("Subscription of %s set to cancel at period end", settings.user_id)
    return jsonify({"success": True, "subscription": normalize_subscription(subscription)})


@v1_bp.route("/billing/subscription/resume", methods=["POST"])
@auth_required()
def resume_subscription():
    settings = current_user_settings()
    subscription = _active_subscription(settings)

    billing.resume_subscription(subscription.stripe_subscription_id)
    subscription = credits.update_subscription(settings.user_id, cancel_at_period_end=False)

    return jsonify({"success": True, "subscription": normalize_subscription(subscription)})


@v1_bp.route("/billing/subscription/change", methods=["POST"])
@auth_required()
def change_plan():
    settings = current_user_settings()
    subscription = _active_subscription(settings)
    data = request.get_json(silent=True) or {}

    plan = billing.get_paid_plan(data.get("planId"))
    billing.change_subscription_plan(subscription.stripe_subscription_id, plan.id)
    subscription = credits.update_subscription(
        settings.user_id,
        plan=plan.id,
        stripe_price_id=plan.stripe_price_id,
    )

    return jsonify({"success": True, "subscription": normalize_subscription(subscription)})
