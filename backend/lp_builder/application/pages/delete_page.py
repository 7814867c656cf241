import logging

from lp_builder.extensions import db
from lp_builder.models.page import Page
from lp_builder.utils.transaction import transactional

logger = logging.getLogger(__name__)


def delete_page(*, page: Page, actor_id: str) -> None:
    page_id = page.id

    with transactional():
        db.session.delete(page)

    logger.info("Page %s deleted by %s", page_id, actor_id)
