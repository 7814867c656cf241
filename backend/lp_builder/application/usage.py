"""Plan limits and credit gating for metered operations."""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional, Union

from lp_builder.application import credits
from lp_builder.domain.ai_costs import estimate_image_cost, estimate_text_cost, IMAGE_MODEL, TEXT_MODEL
from lp_builder.errors import InsufficientCreditError
from lp_builder.domain.plans import (
    get_plan,
    is_unlimited,
    requires_subscription,
    round_half_up,
    usage_percentage,
)
from lp_builder.models.creative import Banner
from lp_builder.models.generation_run import GenerationRun, STATUS_SUCCEEDED
from lp_builder.models.media_image import MediaImage, SOURCE_UPLOAD
from lp_builder.models.page import Page
from lp_builder.models.user_settings import UserSettings

logger = logging.getLogger(__name__)

DEFAULT_ESTIMATED_COST = Decimal("0.001")
STORAGE_MB_PER_IMAGE = Decimal("0.5")

FEATURES = {
    "upscale4K": ("can_upscale_4k", "4K upscale"),
    "restyle": ("can_restyle", "Restyle"),
    "export": ("can_export", "Export"),
    "generateVideo": ("can_generate_video", "Video generation"),
    "setApiKey": ("can_set_api_key", "API key setting"),
}


@dataclass
class LimitCheck:
    allowed: bool
    reason: Optional[str] = None
    current: Optional[int] = None
    limit: Optional[int] = None
    remaining: Union[int, str, None] = None
    current_balance_usd: Optional[Decimal] = None
    estimated_cost_usd: Optional[Decimal] = None
    remaining_after_usd: Optional[Decimal] = None
    need_purchase: bool = False
    need_subscription: bool = False
    using_own_api_key: bool = False
    skip_credit_consumption: bool = False

    def to_dict(self) -> Dict[str, Any]:
        body = {
            "allowed": self.allowed,
            "reason": self.reason,
            "current": self.current,
            "limit": self.limit,
            "remaining": self.remaining,
            "currentBalanceUsd": _float(self.current_balance_usd),
            "estimatedCostUsd": _float(self.estimated_cost_usd),
            "remainingAfterUsd": _float(self.remaining_after_usd),
            "needPurchase": self.need_purchase,
            "needSubscription": self.need_subscription,
            "usingOwnApiKey": self.using_own_api_key,
            "skipCreditConsumption": self.skip_credit_consumption,
        }
        return {k: v for k, v in body.items() if v is not None}


def _float(value):
    return float(value) if value is not None else None


def get_user_plan(user_id: str) -> str:
    settings = UserSettings.query.filter_by(user_id=user_id).first()
    return settings.plan if settings and settings.plan else "free"


def get_user_usage(user_id: str) -> Dict[str, int]:
    since = credits.start_of_month()

    generations = GenerationRun.query.filter(
        GenerationRun.user_id == user_id,
        GenerationRun.created_at >= since,
        GenerationRun.status == STATUS_SUCCEEDED,
    ).count()
    uploads = MediaImage.query.filter(
        MediaImage.user_id == user_id,
        MediaImage.created_at >= since,
        MediaImage.source_type == SOURCE_UPLOAD,
    ).count()
    pages = Page.query.filter_by(user_id=user_id).count()
    banners = Banner.query.filter_by(user_id=user_id).count()

    # Storage is estimated from image counts, not measured
    storage_mb = round_half_up((generations + uploads) * STORAGE_MB_PER_IMAGE)

    return {
        "monthly_generations": generations,
        "monthly_uploads": uploads,
        "total_pages": pages,
        "total_banners": banners,
        "total_storage_mb": int(storage_mb),
    }


def _subscription_needed() -> LimitCheck:
    return LimitCheck(
        allowed=False,
        reason="A subscription is required. Please choose a plan.",
        need_subscription=True,
    )


def check_generation_limit(
    user_settings: UserSettings,
    estimated_cost: Optional[Decimal] = None,
) -> LimitCheck:
    plan_id = user_settings.plan or "free"

    if requires_subscription(plan_id):
        return _subscription_needed()

    plan = get_plan(plan_id)
    if not plan.limits.can_ai_generate:
        return LimitCheck(
            allowed=False,
            reason="AI features are available on paid plans only. Please upgrade your plan.",
        )

    if user_settings.google_api_key:
        return LimitCheck(allowed=True, using_own_api_key=True, skip_credit_consumption=True)

    cost = DEFAULT_ESTIMATED_COST if estimated_cost is None else estimated_cost
    check = credits.check_balance(user_settings.user_id, cost)

    if not check.allowed:
        return LimitCheck(
            allowed=False,
            reason="Insufficient credit balance",
            current_balance_usd=check.current_balance_usd,
            estimated_cost_usd=check.estimated_cost_usd,
            need_purchase=True,
        )

    return LimitCheck(
        allowed=True,
        current_balance_usd=check.current_balance_usd,
        estimated_cost_usd=check.estimated_cost_usd,
        remaining_after_usd=check.remaining_after_usd,
    )


def check_image_generation_limit(user_settings, model=IMAGE_MODEL, image_count=1) -> LimitCheck:
    return check_generation_limit(user_settings, estimate_image_cost(model, image_count))


def check_text_generation_limit(
    user_settings,
    model=TEXT_MODEL,
    estimated_input_tokens=1000,
    estimated_output_tokens=1000,
) -> LimitCheck:
    cost = estimate_text_cost(model, estimated_input_tokens, estimated_output_tokens)
    return check_generation_limit(user_settings, cost)


def record_api_usage(
    *,
    user_id: str,
    generation_run_id: Optional[str],
    cost,
    model: str,
    input_tokens: Optional[int] = None,
    output_tokens: Optional[int] = None,
    image_count: Optional[int] = None,
):
    try:
        return credits.consume_credit(
            user_id=user_id,
            cost=cost,
            generation_run_id=generation_run_id,
            model=model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            image_count=image_count,
        )
    except InsufficientCreditError as exc:
        logger.error(
            "Balance went short between check and charge: user=%s required=%s balance=%s",
            user_id, exc.required_amount, exc.current_balance,
        )
        raise


def _count_limit(user_id: str, usage_key: str, limit_attr: str, label: str) -> LimitCheck:
    plan_id = get_user_plan(user_id)
    if requires_subscription(plan_id):
        return _subscription_needed()

    plan = get_plan(plan_id)
    limit = getattr(plan.limits, limit_attr)
    current = get_user_usage(user_id)[usage_key]

    if is_unlimited(limit):
        return LimitCheck(allowed=True, current=current, limit=limit, remaining="unlimited")

    if current >= limit:
        return LimitCheck(
            allowed=False,
            reason=f"{label} limit ({limit}) reached. Please upgrade your plan.",
            current=current,
            limit=limit,
            remaining=0,
        )

    return LimitCheck(allowed=True, current=current, limit=limit, remaining=limit - current)


def check_page_limit(user_id: str) -> LimitCheck:
    return _count_limit(user_id, "total_pages", "max_pages", "Page")


def check_banner_limit(user_id: str) -> LimitCheck:
    return _count_limit(user_id, "total_banners", "max_banners", "Banner")


def check_upload_limit(user_id: str) -> LimitCheck:
    # Uploads cost no credit
    if requires_subscription(get_user_plan(user_id)):
        return _subscription_needed()
    return LimitCheck(allowed=True)


def check_feature_access(user_id: str, feature: str) -> LimitCheck:
    if feature not in FEATURES:
        raise ValueError(f"Unknown feature: {feature}")

    plan_id = get_user_plan(user_id)
    if requires_subscription(plan_id):
        return _subscription_needed()

    plan = get_plan(plan_id)
    attr, name = FEATURES[feature]
    if not getattr(plan.limits, attr):
        return LimitCheck(
            allowed=False,
            reason=f"{name} is not available on the {plan.name} plan. Please upgrade your plan.",
        )
    return LimitCheck(allowed=True)


def usage_report(user_id: str) -> Dict[str, Any]:
    usage = get_user_usage(user_id)
    plan = get_plan(get_user_plan(user_id))

    return {
        "plan": plan,
        "usage": usage,
        "balance": credits.current_balance(user_id),
        "percentages": {
            "pages": usage_percentage(usage["total_pages"], plan.limits.max_pages),
            "banners": usage_percentage(usage["total_banners"], plan.limits.max_banners),
        },
    }
