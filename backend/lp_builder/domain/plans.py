"""Subscription plans and the limits they gate.

Prices are in JPY. Credit is metered internally in USD and displayed as
tokens (1 JPY = 10 tokens, 1 USD = 150 JPY).
"""
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional, Union

from flask import current_app

UNLIMITED = -1
FREE_BANNER_EDIT_LIMIT = 3

JPY_TO_TOKEN_RATE = 10
USD_TO_JPY_RATE = 150

DEFAULT_PLAN = "free"
PAID_PLAN_IDS = ["starter", "pro", "business", "enterprise", "unlimited"]


@dataclass(frozen=True)
class PlanLimits:
    max_pages: int
    max_banners: int
    max_storage_mb: int
    can_ai_generate: bool
    can_upscale_4k: bool
    can_restyle: bool
    can_export: bool
    can_generate_video: bool
    can_set_api_key: bool
    free_banner_edit_limit: int = 0


@dataclass(frozen=True)
class Plan:
    id: str
    name: str
    price_jpy: int
    included_tokens: int
    included_credit_usd: Decimal
    limits: PlanLimits
    features: List[str] = field(default_factory=list)

    @property
    def stripe_price_id(self) -> str:
        if self.id == DEFAULT_PLAN:
            return ""
        return current_app.config.get(f"STRIPE_PRICE_{self.id.upper()}") or f"price_{self.id}"

    @property
    def is_paid(self) -> bool:
        return self.id in PAID_PLAN_IDS


@dataclass(frozen=True)
class CreditPackage:
    id: int
    name: str
    price_jpy: int
    tokens: int
    credit_usd: Decimal
    plan_id: str


PLANS: Dict[str, Plan] = {
    "free": Plan(
        id="free",
        name="Free",
        price_jpy=0,
        included_tokens=0,
        included_credit_usd=Decimal("0"),
        limits=PlanLimits(
            max_pages=3,
            max_banners=UNLIMITED,
            max_storage_mb=500,
            can_ai_generate=False,
            can_upscale_4k=False,
            can_restyle=False,
            can_export=True,
            can_generate_video=False,
            can_set_api_key=False,
            free_banner_edit_limit=FREE_BANNER_EDIT_LIMIT,
        ),
        features=["Up to 3 pages", "Image upload and editing", "Export"],
    ),
    "starter": Plan(
        id="starter",
        name="Starter",
        price_jpy=10000,
        included_tokens=25000,
        included_credit_usd=Decimal("16.67"),
        limits=PlanLimits(
            max_pages=10,
            max_banners=UNLIMITED,
            max_storage_mb=5000,
            can_ai_generate=True,
            can_upscale_4k=False,
            can_restyle=False,
            can_export=True,
            can_generate_video=False,
            can_set_api_key=False,
        ),
        features=["Up to 10 pages", "25,000 credits per month", "Image generation"],
    ),
    "pro": Plan(
        id="pro",
        name="Pro",
        price_jpy=30000,
        included_tokens=75000,
        included_credit_usd=Decimal("50.00"),
        limits=PlanLimits(
            max_pages=30,
            max_banners=UNLIMITED,
            max_storage_mb=10000,
            can_ai_generate=True,
            can_upscale_4k=True,
            can_restyle=True,
            can_export=True,
            can_generate_video=False,
            can_set_api_key=False,
        ),
        features=["Up to 30 pages", "75,000 credits per month", "4K upscale", "Restyle"],
    ),
    "business": Plan(
        id="business",
        name="Business",
        price_jpy=50000,
        included_tokens=125000,
        included_credit_usd=Decimal("83.33"),
        limits=PlanLimits(
            max_pages=50,
            max_banners=UNLIMITED,
            max_storage_mb=20000,
            can_ai_generate=True,
            can_upscale_4k=True,
            can_restyle=True,
            can_export=True,
            can_generate_video=True,
            can_set_api_key=False,
        ),
        features=["Up to 50 pages", "125,000 credits per month", "Video generation"],
    ),
    "enterprise": Plan(
        id="enterprise",
        name="Enterprise",
        price_jpy=100000,
        included_tokens=250000,
        included_credit_usd=Decimal("166.67"),
        limits=PlanLimits(
            max_pages=UNLIMITED,
            max_banners=UNLIMITED,
            max_storage_mb=UNLIMITED,
            can_ai_generate=True,
            can_upscale_4k=True,
            can_restyle=True,
            can_export=True,
            can_generate_video=True,
            can_set_api_key=False,
        ),
        features=["Unlimited pages", "250,000 credits per month"],
    ),
    "unlimited": Plan(
        id="unlimited",
        name="Unlimited",
        price_jpy=500000,
        included_tokens=1250000,
        included_credit_usd=Decimal("833.33"),
        limits=PlanLimits(
            max_pages=UNLIMITED,
            max_banners=UNLIMITED,
            max_storage_mb=UNLIMITED,
            can_ai_generate=True,
            can_upscale_4k=True,
            can_restyle=True,
            can_export=True,
            can_generate_video=True,
            can_set_api_key=False,
        ),
        features=["Unlimited pages", "1,250,000 credits per month"],
    ),
}

CREDIT_PACKAGES: List[CreditPackage] = [
    CreditPackage(i + 1, f"{PLANS[p].included_tokens:,} credits", PLANS[p].price_jpy,
                  PLANS[p].included_tokens, PLANS[p].included_credit_usd, p)
    for i, p in enumerate(PAID_PLAN_IDS)
]


def get_plan(plan_id: Optional[str]) -> Plan:
    return PLANS.get(plan_id or DEFAULT_PLAN, PLANS[DEFAULT_PLAN])


def requires_subscription(plan_id: Optional[str]) -> bool:
    """Legacy plan ids (e.g. "normal", "premium") must be re-subscribed."""
    if not plan_id:
        return False
    return plan_id not in PLANS


def plan_id_from_price_id(price_id: Optional[str]) -> Optional[str]:
    if not price_id:
        return None
    for plan in PLANS.values():
        if plan.is_paid and plan.stripe_price_id == price_id:
            return plan.id
    return None


def credit_package_for_plan(plan_id: Optional[str]) -> Optional[CreditPackage]:
    for package in CREDIT_PACKAGES:
        if package.plan_id == plan_id:
            return package
    return None


def is_unlimited(limit: int) -> bool:
    return limit == UNLIMITED


def is_within_limit(used: int, limit: int) -> bool:
    if is_unlimited(limit):
        return True
    return used < limit


def remaining_usage(used: int, limit: int) -> Union[int, str]:
    if is_unlimited(limit):
        return "unlimited"
    return max(0, limit - used)


def round_half_up(value: Decimal) -> int:
    # halves round away from zero, not to even
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def usage_percentage(used: int, limit: int) -> int:
    if is_unlimited(limit):
        return 0
    if limit == 0:
        return 100
    return min(100, round_half_up(Decimal(used) * 100 / Decimal(limit)))


def jpy_to_tokens(jpy) -> int:
    return round_half_up(Decimal(str(jpy)) * JPY_TO_TOKEN_RATE)


def usd_to_tokens(usd) -> int:
    return round_half_up(Decimal(str(usd)) * USD_TO_JPY_RATE * JPY_TO_TOKEN_RATE)
