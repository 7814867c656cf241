"""Apply Stripe webhook events to subscriptions, plans and credit."""
import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from lp_builder.application import credits
from lp_builder.domain.plans import PLANS, plan_id_from_price_id
from lp_builder.extensions import db
from lp_builder.models.base import utcnow
from lp_builder.models.subscription import STATUS_ACTIVE, STATUS_CANCELED, Subscription
from lp_builder.models.user_settings import UserSettings

logger = logging.getLogger(__name__)

BILLING_PERIOD = timedelta(days=30)


def _object_id(value):
    if isinstance(value, str):
        return value
    if value:
        return value.get("id")
    return None


def _from_epoch(value):
    if not value:
        return None
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


def _first_price_id(obj, collection):
    items = (obj.get(collection) or {}).get("data") or []
    if not items:
        return None
    price = items[0].get("price") or {}
    return price.get("id")


def _set_user_plan(user_id, plan_id):
    settings = UserSettings.query.filter_by(user_id=user_id).first()
    if settings is None:
        settings = UserSettings(user_id=user_id)
        db.session.add(settings)
    settings.plan = plan_id
    db.session.commit()


def handle_checkout_completed(session):
    metadata = session.get("metadata") or {}
    user_id = metadata.get("userId")

    if not user_id:
        logger.error("No userId in checkout session metadata: %s", session.get("id"))
        return

    mode = session.get("mode")

    if mode == "subscription" and session.get("subscription"):
        plan_id = metadata.get("planId") or "pro"
        plan = PLANS.get(plan_id)
        now = utcnow()

        credits.update_subscription(
            user_id,
            stripe_customer_id=_object_id(session.get("customer")) or "",
            stripe_subscription_id=_object_id(session.get("subscription")),
            stripe_price_id=plan.stripe_price_id if plan else None,
            plan=plan_id,
            status=STATUS_ACTIVE,
            current_period_start=now,
            current_period_end=now + BILLING_PERIOD,
        )
        _set_user_plan(user_id, plan_id)

        if plan is not None:
            credits.grant_plan_credit(
                user_id=user_id,
                credit_usd=plan.included_credit_usd,
                plan_name=plan.name,
            )
        logger.info("Subscription created for user %s, plan: %s", user_id, plan_id)

    elif mode == "payment":
        credit_usd = Decimal(metadata.get("creditUsd") or "0")
        package_name = metadata.get("packageName") or "Credit package"
        payment_id = _object_id(session.get("payment_intent")) or session.get("id")

        if credit_usd > 0:
            credits.add_purchased_credit(
                user_id=user_id,
                credit_usd=credit_usd,
                stripe_payment_id=payment_id,
                package_name=package_name,
            )
            logger.info("Credit purchased for user %s: $%s (%s)", user_id, credit_usd, package_name)


def handle_invoice_paid(invoice):
    # The first invoice is covered by checkout.session.completed
    if invoice.get("billing_reason") != "subscription_cycle":
        return

    subscription_id = _object_id(invoice.get("subscription"))
    if not subscription_id:
        return

    record = Subscription.query.filter_by(stripe_subscription_id=subscription_id).first()
    if record is None:
        logger.error("Subscription not found: %s", subscription_id)
        return

    plan_id = plan_id_from_price_id(_first_price_id(invoice, "lines"))
    plan = PLANS.get(plan_id or record.plan)
    if plan is None:
        return

    credits.grant_plan_credit(
        user_id=record.user_id,
        credit_usd=plan.included_credit_usd,
        plan_name=plan.name,
    )
    now = utcnow()
    credits.update_subscription(
        record.user_id,
        current_period_start=now,
        current_period_end=now + BILLING_PERIOD,
    )
    logger.info("Monthly credit granted for user %s: $%s", record.user_id, plan.included_credit_usd)


def handle_subscription_updated(subscription):
    record = Subscription.query.filter_by(stripe_subscription_id=subscription.get("id")).first()
    if record is None:
        return

    previous_plan = record.plan
    price_id = _first_price_id(subscription, "items")
    new_plan_id = plan_id_from_price_id(price_id)
    now = utcnow()

    changes = {
        "status": subscription.get("status") or record.status,
        "cancel_at_period_end": bool(subscription.get("cancel_at_period_end")),
        "current_period_start": _from_epoch(subscription.get("current_period_start")) or now,
        "current_period_end": _from_epoch(subscription.get("current_period_end")) or now + BILLING_PERIOD,
    }
    if new_plan_id:
        changes.update(plan=new_plan_id, stripe_price_id=price_id)

    credits.update_subscription(record.user_id, **changes)

    if new_plan_id and new_plan_id != previous_plan:
        _set_user_plan(record.user_id, new_plan_id)
        logger.info("Plan of %s changed %s -> %s", record.user_id, previous_plan, new_plan_id)


def handle_subscription_deleted(subscription):
    record = Subscription.query.filter_by(stripe_subscription_id=subscription.get("id")).first()
    if record is None:
        return

    credits.update_subscription(record.user_id, status=STATUS_CANCELED)
    logger.info("Subscription canceled for user %s", record.user_id)


HANDLERS = {
    "checkout.session.completed": handle_checkout_completed,
    "invoice.paid": handle_invoice_paid,
    "customer.subscription.updated": handle_subscription_updated,
    "customer.subscription.deleted": handle_subscription_deleted,
}


def dispatch(event) -> bool:
    """Run the handler for ``event``; returns False for unhandled types."""
    handler = HANDLERS.get(event["type"])
    if handler is None:
        logger.info("Unhandled event type: %s", event["type"])
        return False

    handler(event["data"]["object"])
    return True
