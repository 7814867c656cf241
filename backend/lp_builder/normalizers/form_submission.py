from lp_builder.utils.json_fields import load_json
from ._common import iso


def normalize_form_submission(submission):
    return {
        "id": submission.id,
        "pageId": submission.page_id,
        "pageSlug": submission.page_slug,
        "formTitle": submission.form_title,
        "fields": load_json(submission.fields, []),
        "senderEmail": submission.sender_email,
        "senderName": submission.sender_name,
        "createdAt": iso(submission.created_at),
    }
