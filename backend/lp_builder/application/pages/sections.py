from typing import Any, Dict, Iterable, List, Optional

from lp_builder.errors import BadRequest
from lp_builder.models.media_image import MediaImage
from lp_builder.models.page_section import PageSection
from lp_builder.utils.json_fields import dump_json

DEFAULT_ROLE = "other"


def _offset(value, name):
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise BadRequest(f"{name} must be an integer")
    return value


def build_sections(
    payload: List[Dict[str, Any]],
    model=PageSection,
    owner_id: Optional[str] = None,
    shared_ids: Iterable[str] = (),
) -> list:
    """
    Build unsaved section rows (PageSection or LpTemplateSection) from a
    request payload, ordered 0..N-1 in list position.

    With ``owner_id`` set, referenced images must belong to that user,
    apart from ``shared_ids`` (images the row already shows).
    """
    if not isinstance(payload, list):
        raise BadRequest("sections must be a list")

    image_ids = set()
    for item in payload:
        if not isinstance(item, dict):
            raise BadRequest("Each section must be an object")
        for key in ("imageId", "mobileImageId"):
            value = item.get(key)
            if value is None:
                continue
            if not isinstance(value, str):
                raise BadRequest(f"{key} must be a string")
            if value:
                image_ids.add(value)

    image_ids -= set(shared_ids)
    if image_ids:
        query = MediaImage.query.filter(MediaImage.id.in_(image_ids))
        if owner_id is not None:
            query = query.filter(MediaImage.user_id == owner_id)
        found = {row.id for row in query.all()}
        missing = image_ids - found
        if missing:
            raise BadRequest(f"Unknown image ids: {sorted(missing)}")

    sections = []
    for index, item in enumerate(payload):
        section = model()
        role = item.get("role")
        if role is not None and not isinstance(role, str):
            raise BadRequest("role must be a string")
        section.role = role or DEFAULT_ROLE
        section.order = index
        section.image_id = item.get("imageId") or None
        section.mobile_image_id = item.get("mobileImageId") or None
        section.config = dump_json(item.get("config"))
        section.boundary_offset_top = _offset(item.get("boundaryOffsetTop"), "boundaryOffsetTop")
        section.boundary_offset_bottom = _offset(item.get("boundaryOffsetBottom"), "boundaryOffsetBottom")
        sections.append(section)

    return sections
