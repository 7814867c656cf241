from ._common import iso, money


def normalize_transaction(tx):
    return {
        "id": tx.id,
        "type": tx.type,
        "amountUsd": money(tx.amount_usd),
        "balanceAfter": money(tx.balance_after),
        "description": tx.description,
        "model": tx.model,
        "createdAt": iso(tx.created_at),
    }


def normalize_credit_summary(summary):
    return {
        "currentBalanceUsd": money(summary["balance"]),
        "monthlyUsageUsd": money(summary["monthly_usage"]),
        "monthlyGrantUsd": money(summary["monthly_grant"]),
        "lastRefreshedAt": iso(summary["last_refreshed_at"]),
        "recentTransactions": [normalize_transaction(t) for t in summary["recent_transactions"]],
    }


def normalize_subscription(subscription):
    if subscription is None:
        return None

    return {
        "id": subscription.id,
        "plan": subscription.plan,
        "status": subscription.status,
        "currentPeriodStart": iso(subscription.current_period_start),
        "currentPeriodEnd": iso(subscription.current_period_end),
        "cancelAtPeriodEnd": subscription.cancel_at_period_end,
    }


def normalize_plan(plan):
    limits = plan.limits
    return {
        "id": plan.id,
        "name": plan.name,
        "priceJpy": plan.price_jpy,
        "includedTokens": plan.included_tokens,
        "includedCreditUsd": money(plan.included_credit_usd),
        "features": plan.features,
        "limits": {
            "maxPages": limits.max_pages,
            "maxBanners": limits.max_banners,
            "maxStorageMB": limits.max_storage_mb,
            "canAIGenerate": limits.can_ai_generate,
            "canUpscale4K": limits.can_upscale_4k,
            "canRestyle": limits.can_restyle,
            "canExport": limits.can_export,
            "canGenerateVideo": limits.can_generate_video,
            "canSetApiKey": limits.can_set_api_key,
            "freeBannerEditLimit": limits.free_banner_edit_limit,
        },
    }


def normalize_package(package):
    return {
        "id": package.id,
        "name": package.name,
        "priceJpy": package.price_jpy,
        "tokens": package.tokens,
        "creditUsd": money(package.credit_usd),
        "planId": package.plan_id,
    }


def normalize_usage(usage):
    return {
        "monthlyGenerations": usage["monthly_generations"],
        "monthlyUploads": usage["monthly_uploads"],
        "totalPages": usage["total_pages"],
        "totalBanners": usage["total_banners"],
        "totalStorageMB": usage["total_storage_mb"],
    }


def normalize_usage_report(report):
    return {
        "plan": normalize_plan(report["plan"]),
        "usage": normalize_usage(report["usage"]),
        "credits": {"currentBalanceUsd": money(report["balance"])},
        "percentages": report["percentages"],
    }
