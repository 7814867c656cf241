from ._common import iso


def normalize_upgrade_request(upgrade):
    return {
        "id": upgrade.id,
        "userId": upgrade.user_id,
        "email": upgrade.email,
        "currentPlan": upgrade.current_plan,
        "desiredPlan": upgrade.desired_plan,
        "reason": upgrade.reason,
        "companyName": upgrade.company_name,
        "status": upgrade.status,
        "reviewedBy": upgrade.reviewed_by,
        "reviewNote": upgrade.review_note,
        "createdAt": iso(upgrade.created_at),
        "updatedAt": iso(upgrade.updated_at),
    }
