"""Persist one GenerationRun per AI call, for the admin cost dashboards."""
import logging
import time
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from lp_builder.domain.ai_costs import estimate_image_cost, estimate_text_cost, estimate_tokens
from lp_builder.extensions import db
from lp_builder.models.generation_run import GenerationRun, STATUS_SUCCEEDED

logger = logging.getLogger(__name__)

MAX_TEXT_LENGTH = 10000


def start_timer() -> float:
    return time.monotonic()


def log_generation(
    *,
    user_id: Optional[str],
    type: str,
    endpoint: str,
    model: str,
    input_prompt: str,
    status: str,
    output_result: Optional[str] = None,
    image_count: int = 0,
    error_message: Optional[str] = None,
    started_at: Optional[float] = None,
) -> Optional[GenerationRun]:
    """
    Write a GenerationRun with estimated tokens and cost.

    A failure to log is logged and swallowed; the caller's request must
    not fail because bookkeeping did.
    """
    input_tokens = estimate_tokens(input_prompt)
    output_tokens = estimate_tokens(output_result) if output_result else 0

    if image_count > 0:
        cost = estimate_image_cost(model, image_count)
    else:
        cost = estimate_text_cost(model, input_tokens, output_tokens)

    duration_ms = None
    if started_at is not None:
        duration_ms = int((time.monotonic() - started_at) * 1000)

    run = GenerationRun(
        user_id=user_id,
        type=type,
        endpoint=endpoint,
        model=model,
        input_prompt=(input_prompt or "")[:MAX_TEXT_LENGTH],
        output_result=output_result[:MAX_TEXT_LENGTH] if output_result else None,
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        image_count=image_count or None,
        estimated_cost=Decimal(cost),
        status=status,
        error_message=error_message,
        duration_ms=duration_ms,
    )

    try:
        db.session.add(run)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.error("Failed to log generation: %s", exc)
        return None

    if status == STATUS_SUCCEEDED:
        logger.info("Logged: %s | %s | $%.6f | %sms", type, model, cost, duration_ms)
    else:
        logger.warning("Logged (failed): %s | %s | %s", type, model, error_message)
    return run
