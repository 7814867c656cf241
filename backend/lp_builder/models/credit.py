from decimal import Decimal
from lp_builder.extensions import db
from .base import BaseModel

TX_API_USAGE = "api_usage"
TX_PLAN_GRANT = "plan_grant"
TX_PURCHASE = "purchase"
TX_ADJUSTMENT = "adjustment"

MONEY = db.Numeric(14, 6, asdecimal=True)


class CreditBalance(BaseModel):
    __tablename__ = "credit_balances"

    user_id = db.Column(db.String(36), unique=True, nullable=False, index=True)
    balance_usd = db.Column(MONEY, nullable=False, default=Decimal("0"))
    last_refreshed_at = db.Column(db.DateTime(timezone=True), nullable=True)


class CreditTransaction(BaseModel):
    __tablename__ = "credit_transactions"

    __table_args__ = (
        db.Index("ix_credit_tx_user_type_created", "user_id", "type", "created_at"),
    )

    user_id = db.Column(db.String(36), nullable=False, index=True)
    type = db.Column(db.String(20), nullable=False, index=True)
    amount_usd = db.Column(MONEY, nullable=False)
    balance_after = db.Column(MONEY, nullable=False)
    description = db.Column(db.Text, nullable=True)

    stripe_payment_id = db.Column(db.String(255), nullable=True)
    generation_run_id = db.Column(db.String(36), db.ForeignKey("generation_runs.id"), nullable=True)
    model = db.Column(db.String(100), nullable=True)
    input_tokens = db.Column(db.Integer, nullable=True)
    output_tokens = db.Column(db.Integer, nullable=True)
    image_count = db.Column(db.Integer, nullable=True)
