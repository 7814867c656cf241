import re
from typing import Any, Dict

from lp_builder.domain.lifecycle.page import assert_page_transition
from lp_builder.errors import BadRequest
from lp_builder.models.page import Page
from lp_builder.utils.transaction import transactional

SLUG_PATTERN = re.compile(r"[a-z0-9-]+")
MAX_SLUG_LENGTH = 200
SLUG_TAKEN = "slug is already in use"

# request key -> model attribute
ALLOWED_UPDATE_FIELDS = {
    "title": "title",
    "slug": "slug",
    "status": "status",
    "isFavorite": "is_favorite",
}


def validate_slug(slug: Any) -> None:
    if not isinstance(slug, str) or len(slug) > MAX_SLUG_LENGTH or not SLUG_PATTERN.fullmatch(slug):
        raise BadRequest("slug may only contain lowercase letters, digits and hyphens")


def _validate(data: Dict[str, Any]) -> None:
    if "title" in data:
        title = data["title"]
        if not isinstance(title, str) or not title.strip() or len(title) > 200:
            raise BadRequest("title must be 1-200 characters")

    if "slug" in data:
        validate_slug(data["slug"])

    if "status" in data and not isinstance(data["status"], str):
        raise BadRequest("status must be a string")

    if "isFavorite" in data and not isinstance(data["isFavorite"], bool):
        raise BadRequest("isFavorite must be a boolean")


def update_page(*, page: Page, data: Dict[str, Any]) -> Page:
    """
    Update page metadata.

    Only whitelisted fields are mutable and an empty update is rejected.
    """
    if not any(key in data for key in ALLOWED_UPDATE_FIELDS):
        raise BadRequest("No valid fields provided for update")

    _validate(data)

    with transactional(conflict=SLUG_TAKEN):
        for key, attr in ALLOWED_UPDATE_FIELDS.items():
            if key not in data or getattr(page, attr) == data[key]:
                continue

            if key == "status":
                assert_page_transition(from_status=page.status, to_status=data[key])

            setattr(page, attr, data[key])

    return page
