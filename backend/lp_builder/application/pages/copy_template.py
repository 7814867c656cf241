from lp_builder.domain.invariants.page import assert_page
from lp_builder.extensions import db
from lp_builder.models.lp_template import LpTemplate
from lp_builder.models.page import Page
from lp_builder.models.page_section import PageSection
from lp_builder.utils.transaction import transactional
from .create_page import generate_slug
from .update_page import SLUG_TAKEN


def copy_template(*, template: LpTemplate, user_id: str) -> Page:
    """Create a draft page for ``user_id`` from a template's sections."""
    page = Page()
    page.user_id = user_id
    page.title = template.title
    page.slug = generate_slug()
    page.status = "draft"
    page.template_id = template.id
    page.header_config = template.header_config or "{}"
    page.form_config = template.form_config or "{}"
    page.design_definition = template.design_definition

    for index, source in enumerate(template.sections):
        section = PageSection()
        section.role = source.role
        section.order = index
        section.image_id = source.image_id
        section.mobile_image_id = source.mobile_image_id
        section.config = source.config
        section.boundary_offset_top = source.boundary_offset_top
        section.boundary_offset_bottom = source.boundary_offset_bottom
        page.sections.append(section)

    with transactional(conflict=SLUG_TAKEN):
        db.session.add(page)
        db.session.flush()
        assert_page(page)

    return page
