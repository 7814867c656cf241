"""Banner and thumbnail CRUD; both share one shape."""
from flask import jsonify, request

from lp_builder.application.usage import check_banner_limit
from lp_builder.domain.invariants.creative import assert_dimensions
from lp_builder.errors import BadRequest, PaymentRequired
from lp_builder.extensions import db
from lp_builder.models.creative import Banner, Thumbnail
from lp_builder.models.media_image import MediaImage
from lp_builder.normalizers.creative import normalize_creative
from lp_builder.utils.access import get_owned_or_404
from lp_builder.utils.decorators import auth_required, current_user_id
from lp_builder.utils.json_fields import dump_json
from lp_builder.utils.transaction import transactional
from . import v1_bp

CREATIVE_STATUSES = {"draft", "saved", "generated"}

# request key -> model attribute
COMMON_FIELDS = {
    "title": "title",
    "presetName": "preset_name",
    "prompt": "prompt",
    "productInfo": "product_info",
    "referenceImageUrl": "reference_image_url",
    "imageId": "image_id",
    "status": "status",
}
JSON_FIELDS = {"metadata": "metadata_json", "masks": "masks"}


def _apply(item, data, kind_field):
    for key in (*COMMON_FIELDS, kind_field):
        if data.get(key) is not None and not isinstance(data[key], str):
            raise BadRequest(f"{key} must be a string")

    for key, attr in COMMON_FIELDS.items():
        if key in data:
            setattr(item, attr, data[key])

    if kind_field in data:
        setattr(item, kind_field, data[kind_field])

    for key, attr in JSON_FIELDS.items():
        if key in data:
            setattr(item, attr, dump_json(data[key]))

    if "width" in data:
        item.width = data["width"]
    if "height" in data:
        item.height = data["height"]

    if not item.title:
        raise BadRequest("title is required")
    if not getattr(item, kind_field):
        raise BadRequest(f"{kind_field} is required")
    if item.status not in CREATIVE_STATUSES:
        raise BadRequest(f"status must be one of {sorted(CREATIVE_STATUSES)}")
    if data.get("imageId"):
        image = db.session.get(MediaImage, item.image_id)
        if image is None or not image.is_owned_by(item.user_id):
            raise BadRequest("Unknown imageId")

    assert_dimensions(item.width, item.height)


def _register(model, plural, kind_field, enforce_limit):
    label = model.__name__

    def list_items():
        items = (
            model.query.filter_by(user_id=current_user_id())
            .order_by(model.updated_at.desc())
            .all()
        )
        return jsonify([normalize_creative(i) for i in items])

    def create_item():
        user_id = current_user_id()
        data = request.get_json(silent=True) or {}

        if enforce_limit:
            check = check_banner_limit(user_id)
            if not check.allowed:
                raise PaymentRequired(check.reason, **check.to_dict())

        item = model(user_id=user_id, status="draft")
        with transactional():
            _apply(item, data, kind_field)
            db.session.add(item)

        return jsonify(normalize_creative(item)), 201

    def get_item(item_id):
        return jsonify(normalize_creative(get_owned_or_404(model, item_id, label)))

    def update_item(item_id):
        item = get_owned_or_404(model, item_id, label)
        data = request.get_json(silent=True) or {}

        with transactional():
            _apply(item, data, kind_field)

        return jsonify(normalize_creative(item))

    def delete_item(item_id):
        item = get_owned_or_404(model, item_id, label)
        db.session.delete(item)
        db.session.commit()
        return jsonify({"success": True})

    prefix = f"/{plural}"
    v1_bp.add_url_rule(prefix, f"list_{plural}", auth_required()(list_items), methods=["GET"])
    v1_bp.add_url_rule(prefix, f"create_{plural}", auth_required()(create_item), methods=["POST"])
    item_url = f"{prefix}/<item_id>"
    v1_bp.add_url_rule(item_url, f"get_{plural}", auth_required()(get_item), methods=["GET"])
    v1_bp.add_url_rule(item_url, f"update_{plural}", auth_required()(update_item), methods=["PUT", "PATCH"])
    v1_bp.add_url_rule(item_url, f"delete_{plural}", auth_required()(delete_item), methods=["DELETE"])


_register(Banner, "banners", "platform", enforce_limit=True)
_register(Thumbnail, "thumbnails", "category", enforce_limit=False)
