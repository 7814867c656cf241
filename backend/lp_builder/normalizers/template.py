from lp_builder.utils.json_fields import load_json
from ._common import iso
from .section import normalize_section


def normalize_template(template, include_sections=False):
    data = {
        "id": template.id,
        "title": template.title,
        "description": template.description,
        "category": template.category,
        "thumbnailUrl": template.thumbnail_url,
        "sourceUrl": template.source_url,
        "isPublished": template.is_published,
        "headerConfig": load_json(template.header_config, {}),
        "formConfig": load_json(template.form_config, {}),
        "designDefinition": load_json(template.design_definition),
        "sectionCount": len(template.sections),
        "createdAt": iso(template.created_at),
        "updatedAt": iso(template.updated_at),
    }

    if include_sections:
        data["sections"] = [normalize_section(s) for s in template.sections]

    return data
