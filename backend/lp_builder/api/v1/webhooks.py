import stripe
from flask import current_app, jsonify, request

from lp_builder.application import billing, stripe_events
from lp_builder.errors import BadRequest
from . import v1_bp


@v1_bp.route("/webhooks/stripe", methods=["POST"])
def stripe_webhook():
    payload = request.get_data()
    signature = request.headers.get("Stripe-Signature")

    if not signature:
        raise BadRequest("Missing stripe-signature header")

    try:
        event = billing.construct_event(payload, signature)
    except ValueError:
        current_app.logger.error("Stripe webhook: invalid payload")
        raise BadRequest("Invalid payload")
    except stripe.SignatureVerificationError:
        current_app.logger.error("Stripe webhook: invalid signature")
        raise BadRequest("Invalid signature")

    current_app.logger.info("Stripe event %s (%s)", event["type"], event.get("id"))
    stripe_events.dispatch(event)

    return jsonify({"received": True})
