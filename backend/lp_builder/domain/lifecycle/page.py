from typing import Set

from lp_builder.domain.invariants.exceptions import InvariantViolation

STATUS_DRAFT = "draft"
STATUS_PUBLISHED = "published"

ALLOWED_PAGE_TRANSITIONS: dict[str, Set[str]] = {
    STATUS_DRAFT: {STATUS_DRAFT, STATUS_PUBLISHED},
    STATUS_PUBLISHED: {STATUS_PUBLISHED, STATUS_DRAFT},
}


def assert_page_transition(*, from_status: str, to_status: str) -> None:
    allowed = ALLOWED_PAGE_TRANSITIONS.get(from_status, set())

    if not isinstance(to_status, str) or to_status not in allowed:
        raise InvariantViolation(
            f"Illegal page transition: {from_status} -> {to_status}"
        )
