"""Per-user USD credit ledger.

Every balance change writes a CreditTransaction carrying ``balance_after``.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from lp_builder.errors import InsufficientCreditError, NotFound
from lp_builder.extensions import db
from lp_builder.models.base import utcnow
from lp_builder.models.credit import (
    CreditBalance,
    CreditTransaction,
    TX_ADJUSTMENT,
    TX_API_USAGE,
    TX_PLAN_GRANT,
    TX_PURCHASE,
)
from lp_builder.models.subscription import Subscription
from lp_builder.utils.transaction import transactional

logger = logging.getLogger(__name__)

RECENT_TRANSACTIONS = 20


@dataclass
class CreditCheck:
    allowed: bool
    current_balance_usd: Decimal
    estimated_cost_usd: Decimal
    remaining_after_usd: Decimal
    need_purchase: bool = False


def _money(value) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def start_of_month(now: Optional[datetime] = None) -> datetime:
    now = now or datetime.now(timezone.utc)
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def get_or_create_balance(user_id: str) -> CreditBalance:
    balance = CreditBalance.query.filter_by(user_id=user_id).first()
    if balance is not None:
        return balance

    balance = CreditBalance(user_id=user_id, balance_usd=Decimal("0"))
    db.session.add(balance)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        balance = CreditBalance.query.filter_by(user_id=user_id).one()
    return balance


def _locked_balance(user_id: str) -> Optional[CreditBalance]:
    return (
        CreditBalance.query.filter_by(user_id=user_id)
        .with_for_update()
        .first()
    )


def _record(user_id, tx_type, amount, balance, **fields) -> CreditTransaction:
    tx = CreditTransaction(
        user_id=user_id,
        type=tx_type,
        amount_usd=amount,
        balance_after=balance.balance_usd,
        **fields,
    )
    db.session.add(tx)
    return tx


def check_balance(user_id: str, estimated_cost) -> CreditCheck:
    balance = get_or_create_balance(user_id)
    current = _money(balance.balance_usd)
    cost = _money(estimated_cost)
    remaining = current - cost

    return CreditCheck(
        allowed=remaining >= 0,
        current_balance_usd=current,
        estimated_cost_usd=cost,
        remaining_after_usd=remaining,
        need_purchase=remaining < 0,
    )


def consume_credit(
    *,
    user_id: str,
    cost,
    generation_run_id: Optional[str] = None,
    model: str,
    input_tokens: Optional[int] = None,
    output_tokens: Optional[int] = None,
    image_count: Optional[int] = None,
) -> CreditTransaction:
    """
    Debit ``cost`` after a generation succeeded.

    The balance is re-read under a row lock; a short balance raises
    InsufficientCreditError and nothing is written.
    """
    cost = _money(cost)

    with transactional():
        balance = _locked_balance(user_id)
        if balance is None:
            raise NotFound(f"Credit balance not found for user: {user_id}")

        current = _money(balance.balance_usd)
        if current < cost:
            raise InsufficientCreditError(current, cost)

        balance.balance_usd = current - cost
        tx = _record(
            user_id,
            TX_API_USAGE,
            -cost,
            balance,
            description=f"API usage: {model}",
            generation_run_id=generation_run_id,
            model=model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            image_count=image_count,
        )

    return tx


def grant_plan_credit(*, user_id: str, credit_usd, plan_name: str) -> CreditTransaction:
    credit = _money(credit_usd)

    with transactional():
        balance = _locked_balance(user_id)
        if balance is None:
            balance = CreditBalance(user_id=user_id, balance_usd=Decimal("0"))
            db.session.add(balance)

        balance.balance_usd = _money(balance.balance_usd) + credit
        balance.last_refreshed_at = utcnow()
        tx = _record(
            user_id,
            TX_PLAN_GRANT,
            credit,
            balance,
            description=f"Monthly credit for {plan_name} plan",
        )

    logger.info("Granted %s USD plan credit to %s (%s)", credit, user_id, plan_name)
    return tx


def add_purchased_credit(
    *,
    user_id: str,
    credit_usd,
    stripe_payment_id: Optional[str],
    package_name: str,
) -> CreditTransaction:
    credit = _money(credit_usd)

    with transactional():
        balance = _locked_balance(user_id)
        if balance is None:
            balance = CreditBalance(user_id=user_id, balance_usd=Decimal("0"))
            db.session.add(balance)

        balance.balance_usd = _money(balance.balance_usd) + credit
        tx = _record(
            user_id,
            TX_PURCHASE,
            credit,
            balance,
            description=f"Credit purchase: {package_name}",
            stripe_payment_id=stripe_payment_id,
        )

    logger.info("Added %s USD purchased credit to %s", credit, user_id)
    return tx


def adjust_credit(*, user_id: str, amount_usd, description: str, admin_id: str) -> CreditTransaction:
    """Admin service credit; ``amount_usd`` is signed."""
    amount = _money(amount_usd)

    with transactional():
        balance = _locked_balance(user_id)
        if balance is None:
            balance = CreditBalance(user_id=user_id, balance_usd=Decimal("0"))
            db.session.add(balance)

        balance.balance_usd = _money(balance.balance_usd) + amount
        tx = _record(
            user_id,
            TX_ADJUSTMENT,
            amount,
            balance,
            description=f"Service credit ({admin_id}): {description}",
        )

    logger.info("Admin %s adjusted credit of %s by %s", admin_id, user_id, amount)
    return tx


def current_balance(user_id: str) -> Decimal:
    return _money(get_or_create_balance(user_id).balance_usd)


def _monthly_sum(user_id: str, tx_type: str, since: datetime) -> Decimal:
    total = (
        db.session.query(func.coalesce(func.sum(CreditTransaction.amount_usd), 0))
        .filter(
            CreditTransaction.user_id == user_id,
            CreditTransaction.type == tx_type,
            CreditTransaction.created_at >= since,
        )
        .scalar()
    )
    return _money(total or 0)


def credit_summary(user_id: str) -> Dict[str, Any]:
    balance = get_or_create_balance(user_id)
    since = start_of_month()

    recent = (
        CreditTransaction.query.filter_by(user_id=user_id)
        .order_by(CreditTransaction.created_at.desc())
        .limit(RECENT_TRANSACTIONS)
        .all()
    )

    return {
        "balance": _money(balance.balance_usd),
        "monthly_usage": abs(_monthly_sum(user_id, TX_API_USAGE, since)),
        "monthly_grant": _monthly_sum(user_id, TX_PLAN_GRANT, since),
        "last_refreshed_at": balance.last_refreshed_at,
        "recent_transactions": recent,
    }


def get_subscription(user_id: str) -> Optional[Subscription]:
    return Subscription.query.filter_by(user_id=user_id).first()


SUBSCRIPTION_FIELDS = {
    "stripe_customer_id",
    "stripe_subscription_id",
    "stripe_price_id",
    "plan",
    "status",
    "current_period_start",
    "current_period_end",
    "cancel_at_period_end",
}


def update_subscription(user_id: str, **data) -> Subscription:
    """Upsert the caller's subscription row by user id."""
    unknown = set(data) - SUBSCRIPTION_FIELDS
    if unknown:
        raise ValueError(f"Unknown subscription fields: {sorted(unknown)}")

    with transactional():
        subscription = get_subscription(user_id)
        if subscription is None:
            subscription = Subscription(
                user_id=user_id,
                plan=data.get("plan") or "pro",
                status=data.get("status") or "active",
                cancel_at_period_end=bool(data.get("cancel_at_period_end", False)),
            )
            db.session.add(subscription)

        for field, value in data.items():
            setattr(subscription, field, value)

    return subscription
