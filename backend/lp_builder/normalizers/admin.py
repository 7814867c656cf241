from ._common import iso, money
from .billing import normalize_usage


def _maybe_iso(value):
    return value if value is None or isinstance(value, str) else iso(value)


def normalize_admin_user(row):
    user = row["user"]
    settings = row["settings"]
    subscription = row["subscription"]

    return {
        "id": user["id"],
        "email": user["email"],
        "createdAt": _maybe_iso(user["created_at"]),
        "lastSignInAt": _maybe_iso(user["last_sign_in_at"]),
        "role": settings.role if settings else "user",
        "isBanned": bool(settings and settings.is_banned),
        "bannedAt": iso(settings.banned_at) if settings else None,
        "banReason": settings.ban_reason if settings else None,
        "plan": settings.plan if settings else "free",
        "subscriptionStatus": subscription.status if subscription else None,
        "hasSubscription": bool(subscription and subscription.stripe_subscription_id),
        "usage": normalize_usage(row["usage"]),
    }


def normalize_generation_run(run):
    return {
        "id": run.id,
        "userId": run.user_id,
        "type": run.type,
        "endpoint": run.endpoint,
        "model": run.model,
        "inputTokens": run.input_tokens,
        "outputTokens": run.output_tokens,
        "imageCount": run.image_count,
        "estimatedCost": money(run.estimated_cost),
        "status": run.status,
        "errorMessage": run.error_message,
        "durationMs": run.duration_ms,
        "createdAt": iso(run.created_at),
    }


def _group(rows, key_name):
    return [
        {key_name: r["key"], "count": r["count"], "cost": r["cost"], "images": r["images"]}
        for r in rows
    ]


def normalize_stats(stats):
    summary = stats["summary"]
    return {
        "period": {
            "days": stats["period"]["days"],
            "startDate": iso(stats["period"]["start"]),
            "endDate": iso(stats["period"]["end"]),
        },
        "summary": {
            "totalCalls": summary["total_calls"],
            "totalCost": summary["total_cost"],
            "totalInputTokens": summary["total_input_tokens"],
            "totalOutputTokens": summary["total_output_tokens"],
            "totalImages": summary["total_images"],
            "avgDurationMs": summary["avg_duration_ms"],
        },
        "daily": stats["daily"],
        "byModel": _group(stats["by_model"], "model"),
        "byType": _group(stats["by_type"], "type"),
        "errorRate": stats["error_rate"],
    }
