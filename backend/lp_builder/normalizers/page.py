from lp_builder.utils.json_fields import load_json
from ._common import iso
from .section import normalize_section


def normalize_page(page, include_sections=True):
    data = {
        "id": page.id,
        "userId": page.user_id,
        "title": page.title,
        "slug": page.slug,
        "status": page.status,
        "isFavorite": page.is_favorite,
        "templateId": page.template_id,
        "headerConfig": load_json(page.header_config, {}),
        "formConfig": load_json(page.form_config, {}),
        "designDefinition": load_json(page.design_definition),
        "createdAt": iso(page.created_at),
        "updatedAt": iso(page.updated_at),
    }

    if include_sections:
        sections = sorted(page.sections, key=lambda s: s.order)
        data["sections"] = [normalize_section(s) for s in sections]

    return data


def _public_header(page, navigation):
    navigation = navigation if isinstance(navigation, dict) else {}
    sticky = navigation.get("sticky")

    header = {
        "title": page.title,
        "logoText": navigation.get("logoText") or page.title,
        "sticky": True if sticky is None else sticky,
        "ctaText": navigation.get("ctaText") or "Contact",
        "ctaLink": navigation.get("ctaLink") or "#contact",
        "navItems": navigation.get("navItems") or [],
    }

    # the page's own header wins over site navigation
    own = load_json(page.header_config, {})
    if isinstance(own, dict):
        header.update(own)
    return header


def normalize_public_page(page, navigation=None):
    """Published page as visitors see it; owner fields are left out."""
    sections = [normalize_section(s) for s in sorted(page.sections, key=lambda s: s.order)]
    for section in sections:
        for key in ("image", "mobileImage"):
            if section[key]:
                section[key].pop("userId", None)

    first_config = sections[0]["config"] if sections else None
    layout = first_config.get("layout") if isinstance(first_config, dict) else None

    return {
        "id": page.id,
        "title": page.title,
        "slug": page.slug,
        "headerConfig": _public_header(page, navigation),
        "formConfig": load_json(page.form_config, {}),
        "designDefinition": load_json(page.design_definition),
        "layout": layout or "mobile",
        "sections": sections,
        "updatedAt": iso(page.updated_at),
    }
