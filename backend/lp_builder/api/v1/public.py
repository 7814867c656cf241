from flask import jsonify

from lp_builder.domain.lifecycle.page import STATUS_PUBLISHED
from lp_builder.errors import NotFound
from lp_builder.models.global_config import GlobalConfig
from lp_builder.models.page import Page
from lp_builder.normalizers.page import normalize_public_page
from lp_builder.utils.json_fields import load_json
from . import v1_bp

NAVIGATION_KEY = "navigation"


@v1_bp.route("/p/<slug>", methods=["GET"])
def get_public_page(slug):
    page = Page.query.filter_by(slug=slug, status=STATUS_PUBLISHED).first()
    if page is None:
        raise NotFound("Page not found")

    navigation = GlobalConfig.query.filter_by(key=NAVIGATION_KEY).first()

    return jsonify(normalize_public_page(page, load_json(navigation.value) if navigation else None))
