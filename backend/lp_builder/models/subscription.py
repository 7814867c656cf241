from lp_builder.extensions import db
from .base import BaseModel

STATUS_ACTIVE = "active"
STATUS_CANCELED = "canceled"


class Subscription(BaseModel):
    __tablename__ = "subscriptions"

    user_id = db.Column(db.String(36), unique=True, nullable=False, index=True)
    stripe_customer_id = db.Column(db.String(255), unique=True, nullable=False)
    stripe_subscription_id = db.Column(db.String(255), unique=True, nullable=True, index=True)
    stripe_price_id = db.Column(db.String(255), nullable=True)

    plan = db.Column(db.String(50), nullable=False, default="pro")
    status = db.Column(db.String(30), nullable=False, default=STATUS_ACTIVE)
    # active | past_due | canceled | incomplete | trialing

    current_period_start = db.Column(db.DateTime(timezone=True), nullable=True)
    current_period_end = db.Column(db.DateTime(timezone=True), nullable=True)
    cancel_at_period_end = db.Column(db.Boolean, nullable=False, default=False)
