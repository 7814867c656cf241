from ._common import iso


def normalize_inquiry(inquiry):
    return {
        "id": inquiry.id,
        "userId": inquiry.user_id,
        "email": inquiry.email,
        "subject": inquiry.subject,
        "body": inquiry.body,
        "status": inquiry.status,
        "isRead": inquiry.is_read,
        "adminNote": inquiry.admin_note,
        "createdAt": iso(inquiry.created_at),
        "updatedAt": iso(inquiry.updated_at),
    }
