from typing import Any, Dict

from lp_builder.application.pages.sections import build_sections
from lp_builder.errors import BadRequest
from lp_builder.extensions import db
from lp_builder.models.lp_template import LpTemplate, LpTemplateSection
from lp_builder.models.media_image import MediaImage
from lp_builder.utils.json_fields import dump_json
from lp_builder.utils.transaction import transactional

DEFAULT_CATEGORY = "general"

SCALAR_FIELDS = {
    "title": "title",
    "description": "description",
    "category": "category",
    "thumbnailUrl": "thumbnail_url",
    "sourceUrl": "source_url",
    "isPublished": "is_published",
}
JSON_FIELDS = {
    "headerConfig": "header_config",
    "formConfig": "form_config",
    "designDefinition": "design_definition",
}


def _first_image_url(template):
    for section in template.sections:
        if section.image_id:
            image = db.session.get(MediaImage, section.image_id)
            return image.file_path if image else None
    return None


def _apply(template: LpTemplate, data: Dict[str, Any]) -> None:
    if not data.get("title", template.title):
        raise BadRequest("Title is required")

    for key, attr in SCALAR_FIELDS.items():
        if key in data:
            setattr(template, attr, data[key])
    for key, attr in JSON_FIELDS.items():
        if key in data:
            value = data[key]
            if value is None and attr != "design_definition":
                value = {}
            setattr(template, attr, dump_json(value))

    if "sections" in data:
        template.sections = []
        db.session.flush()
        template.sections = build_sections(data["sections"], model=LpTemplateSection)

    if not template.thumbnail_url:
        template.thumbnail_url = _first_image_url(template)


def create_template(*, data: Dict[str, Any], created_by: str) -> LpTemplate:
    """New templates start unpublished."""
    template = LpTemplate(
        category=DEFAULT_CATEGORY,
        header_config="{}",
        form_config="{}",
        is_published=False,
        created_by=created_by,
    )

    with transactional():
        db.session.add(template)
        _apply(template, {k: v for k, v in data.items() if k != "isPublished"})

    return template


def update_template(*, template: LpTemplate, data: Dict[str, Any]) -> LpTemplate:
    with transactional():
        _apply(template, data)
    return template


def delete_template(template: LpTemplate) -> None:
    with transactional():
        db.session.delete(template)
