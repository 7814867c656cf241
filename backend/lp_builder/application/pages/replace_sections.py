from typing import Any, Dict

from lp_builder.domain.invariants.page import assert_page
from lp_builder.domain.lifecycle.page import assert_page_transition
from lp_builder.errors import BadRequest
from lp_builder.extensions import db
from lp_builder.models.base import utcnow
from lp_builder.models.page import Page
from lp_builder.utils.json_fields import dump_json
from lp_builder.utils.order import compact_order
from lp_builder.utils.transaction import transactional
from .sections import build_sections


def replace_sections(*, page: Page, data: Dict[str, Any]) -> Page:
    """
    Replace the whole section list of a page (editor save).

    Header config, status and design definition are updated when given.
    """
    if "sections" not in data:
        raise BadRequest("sections is required")

    current_images = {
        image_id
        for section in page.sections
        for image_id in (section.image_id, section.mobile_image_id)
        if image_id
    }
    new_sections = build_sections(data["sections"], owner_id=page.user_id, shared_ids=current_images)

    with transactional():
        # delete-orphan cascade removes the old rows
        page.sections = []
        db.session.flush()

        page.sections = new_sections
        compact_order(page.sections)

        if data.get("headerConfig"):
            page.header_config = dump_json(data["headerConfig"])
        if data.get("designDefinition"):
            page.design_definition = dump_json(data["designDefinition"])
        if data.get("status"):
            assert_page_transition(from_status=page.status, to_status=data["status"])
            page.status = data["status"]

        page.updated_at = utcnow()
        assert_page(page)

    return page
