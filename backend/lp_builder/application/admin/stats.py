from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, Optional

from sqlalchemy import func

from lp_builder.domain.plans import round_half_up
from lp_builder.extensions import db
from lp_builder.models.generation_run import GenerationRun, STATUS_FAILED


def _num(value) -> float:
    return float(value or 0)


def generation_stats(*, days: int = 30, user_id: Optional[str] = None) -> Dict[str, Any]:
    """Generation counts and estimated cost over the last ``days`` days."""
    end = datetime.now(timezone.utc)
    start = end - timedelta(days=days)

    filters = [GenerationRun.created_at >= start]
    if user_id:
        filters.append(GenerationRun.user_id == user_id)

    totals = db.session.query(
        func.count(GenerationRun.id),
        func.sum(GenerationRun.estimated_cost),
        func.sum(GenerationRun.input_tokens),
        func.sum(GenerationRun.output_tokens),
        func.sum(GenerationRun.image_count),
        func.sum(GenerationRun.duration_ms),
    ).filter(*filters).one()
    count, cost, input_tokens, output_tokens, images, duration = totals

    def grouped(column):
        rows = (
            db.session.query(
                column,
                func.count(GenerationRun.id),
                func.sum(GenerationRun.estimated_cost),
                func.sum(GenerationRun.image_count),
            )
            .filter(*filters)
            .group_by(column)
            .all()
        )
        return [
            {"key": key, "count": n, "cost": _num(c), "images": int(i or 0)}
            for key, n, c, i in rows
        ]

    failed = (
        db.session.query(func.count(GenerationRun.id))
        .filter(*filters, GenerationRun.status == STATUS_FAILED)
        .scalar()
    )

    daily: Dict[str, Dict[str, Any]] = {}
    day = start.date()
    while day <= end.date():
        daily[day.isoformat()] = {"count": 0, "cost": Decimal("0"), "errors": 0}
        day += timedelta(days=1)

    runs = (
        db.session.query(GenerationRun.created_at, GenerationRun.estimated_cost, GenerationRun.status)
        .filter(*filters)
        .all()
    )
    for created_at, run_cost, status in runs:
        bucket = daily.get(created_at.date().isoformat())
        if bucket is None:
            continue
        bucket["count"] += 1
        bucket["cost"] += Decimal(run_cost or 0)
        bucket["errors"] += 1 if status == STATUS_FAILED else 0

    return {
        "period": {"days": days, "start": start, "end": end},
        "summary": {
            "total_calls": count,
            "total_cost": _num(cost),
            "total_input_tokens": int(input_tokens or 0),
            "total_output_tokens": int(output_tokens or 0),
            "total_images": int(images or 0),
            "avg_duration_ms": round_half_up(Decimal(str(duration or 0)) / count) if count else 0,
        },
        "daily": [
            {"date": key, "count": v["count"], "cost": float(v["cost"]), "errors": v["errors"]}
            for key, v in daily.items()
        ],
        "by_model": grouped(GenerationRun.model),
        "by_type": grouped(GenerationRun.type),
        "error_rate": {
            "total": count,
            "failed": failed,
            "rate": (failed / count * 100) if count else 0,
        },
    }
