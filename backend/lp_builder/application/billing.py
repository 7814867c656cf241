"""Stripe Checkout, Billing Portal and subscription management."""
import logging
from typing import Optional

import stripe
from flask import current_app

from lp_builder.domain.plans import CREDIT_PACKAGES, PLANS, Plan
from lp_builder.errors import ApiError, BadRequest, ServiceUnavailable

logger = logging.getLogger(__name__)

CHECKOUT_LOCALE = "ja"


class BillingError(ApiError):
    status_code = 500
    default_message = "Payment service error"


def _configure():
    secret = current_app.config.get("STRIPE_SECRET_KEY")
    if not secret:
        raise ServiceUnavailable("STRIPE_SECRET_KEY is not configured")
    stripe.api_key = secret


def _base_url():
    return current_app.config["BASE_URL"].rstrip("/")


def get_paid_plan(plan_id) -> Plan:
    plan = PLANS.get(plan_id or "")
    if plan is None or not plan.is_paid:
        raise BadRequest("Please choose a valid plan")
    return plan


def get_or_create_customer(email: str, user_id: str) -> str:
    _configure()
    existing = stripe.Customer.list(email=email, limit=1)
    if existing.data:
        return existing.data[0].id

    customer = stripe.Customer.create(email=email, metadata={"userId": user_id})
    logger.info("Created Stripe customer %s for %s", customer.id, user_id)
    return customer.id


def create_plan_checkout(plan_id: str) -> str:
    """Checkout for a visitor without an account; Stripe collects the email."""
    plan = get_paid_plan(plan_id)
    _configure()

    try:
        session = stripe.checkout.Session.create(
            mode="subscription",
            line_items=[{"price": plan.stripe_price_id, "quantity": 1}],
            success_url=f"{_base_url()}/welcome?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{_base_url()}/?canceled=true",
            metadata={"planId": plan.id},
            subscription_data={"metadata": {"planId": plan.id}},
            allow_promotion_codes=True,
            billing_address_collection="required",
            payment_method_types=["card"],
            locale=CHECKOUT_LOCALE,
        )
    except stripe.StripeError as exc:
        logger.error("Stripe error creating plan checkout: %s", exc)
        raise BillingError("Failed to create checkout session") from exc

    return session.url


def create_subscription_checkout(
    *,
    user_id: str,
    email: str,
    plan_id: str,
    customer_id: Optional[str] = None,
) -> str:
    plan = get_paid_plan(plan_id)
    _configure()

    try:
        customer_id = customer_id or get_or_create_customer(email, user_id)
        session = stripe.checkout.Session.create(
            customer=customer_id,
            mode="subscription",
            line_items=[{"price": plan.stripe_price_id, "quantity": 1}],
            success_url=f"{_base_url()}/admin/settings?subscription=success&session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{_base_url()}/admin/settings?subscription=canceled",
            metadata={"userId": user_id, "planId": plan.id},
            subscription_data={"metadata": {"userId": user_id, "planId": plan.id}},
            allow_promotion_codes=True,
            billing_address_collection="required",
            payment_method_types=["card"],
            locale=CHECKOUT_LOCALE,
        )
    except stripe.StripeError as exc:
        logger.error("Stripe error creating subscription checkout: %s", exc)
        raise BillingError("Failed to create checkout session") from exc

    return session.url


def create_credit_checkout(
    *,
    user_id: str,
    email: str,
    package_id: int,
    customer_id: Optional[str] = None,
) -> str:
    package = next((p for p in CREDIT_PACKAGES if p.id == package_id), None)
    if package is None:
        raise BadRequest("Invalid package")
    _configure()

    try:
        customer_id = customer_id or get_or_create_customer(email, user_id)
        session = stripe.checkout.Session.create(
            customer=customer_id,
            mode="payment",
            line_items=[{
                "price_data": {
                    "currency": "jpy",
                    "product_data": {
                        "name": f"API credit ({package.name})",
                        "description": f"${package.credit_usd:.2f} of API credit",
                    },
                    "unit_amount": package.price_jpy,
                },
                "quantity": 1,
            }],
            success_url=f"{_base_url()}/admin/settings?credit=success&session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{_base_url()}/admin/settings?credit=canceled",
            metadata={
                "userId": user_id,
                "packageId": str(package.id),
                "creditUsd": str(package.credit_usd),
                "packageName": package.name,
            },
            payment_method_types=["card"],
            locale=CHECKOUT_LOCALE,
        )
    except stripe.StripeError as exc:
        logger.error("Stripe error creating credit checkout: %s", exc)
        raise BillingError("Failed to create checkout session") from exc

    return session.url


def create_portal_session(customer_id: str, return_url: Optional[str] = None) -> str:
    _configure()
    try:
        session = stripe.billing_portal.Session.create(
            customer=customer_id,
            return_url=return_url or f"{_base_url()}/admin/settings",
        )
    except stripe.StripeError as exc:
        logger.error("Stripe error creating portal session: %s", exc)
        raise BillingError("Failed to create portal session") from exc
    return session.url


def cancel_subscription(subscription_id: str, at_period_end: bool = True):
    _configure()
    try:
        if at_period_end:
            return stripe.Subscription.modify(subscription_id, cancel_at_period_end=True)
        return stripe.Subscription.cancel(subscription_id)
    except stripe.StripeError as exc:
        logger.error("Stripe error canceling %s: %s", subscription_id, exc)
        raise BillingError("Failed to cancel subscription") from exc


def resume_subscription(subscription_id: str):
    _configure()
    try:
        return stripe.Subscription.modify(subscription_id, cancel_at_period_end=False)
    except stripe.StripeError as exc:
        logger.error("Stripe error resuming %s: %s", subscription_id, exc)
        raise BillingError("Failed to resume subscription") from exc


def change_subscription_plan(subscription_id: str, plan_id: str):
    plan = get_paid_plan(plan_id)
    _configure()
    try:
        current = stripe.Subscription.retrieve(subscription_id)
        item_id = current["items"]["data"][0]["id"]
        return stripe.Subscription.modify(
            subscription_id,
            items=[{"id": item_id, "price": plan.stripe_price_id}],
            proration_behavior="create_prorations",
            metadata={"planId": plan.id},
        )
    except stripe.StripeError as exc:
        logger.error("Stripe error changing plan of %s: %s", subscription_id, exc)
        raise BillingError("Failed to change plan") from exc


def subscription_details(subscription_id: str):
    """Latest Stripe view of a subscription, or None when unavailable."""
    _configure()
    try:
        return stripe.Subscription.retrieve(subscription_id)
    except stripe.StripeError as exc:
        logger.warning("Could not retrieve subscription %s: %s", subscription_id, exc)
        return None


def construct_event(payload: bytes, signature: str):
    secret = current_app.config.get("STRIPE_WEBHOOK_SECRET")
    if not secret:
        raise ServiceUnavailable("Webhook not configured")
    return stripe.Webhook.construct_event(payload, signature, secret)
