from ._common import iso


def normalize_reply(reply):
    return {
        "id": reply.id,
        "entryId": reply.entry_id,
        "message": reply.message,
        "adminId": reply.admin_id,
        "adminName": reply.admin_name,
        "createdAt": iso(reply.created_at),
    }


def normalize_entry(entry, include_replies=True):
    data = {
        "id": entry.id,
        "accountType": entry.account_type,
        "companyName": entry.company_name,
        "name": entry.name,
        "email": entry.email,
        "phone": entry.phone,
        "remarks": entry.remarks,
        "plan": entry.plan,
        "status": entry.status,
        "adminNotes": entry.admin_notes,
        "processedAt": iso(entry.processed_at),
        "processedBy": entry.processed_by,
        "createdAt": iso(entry.created_at),
    }

    if include_replies:
        data["replies"] = [normalize_reply(r) for r in entry.replies]

    return data
