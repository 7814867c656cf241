from flask import jsonify, request

from lp_builder.errors import BadRequest
from lp_builder.extensions import db
from lp_builder.models.global_config import GlobalConfig
from lp_builder.utils.decorators import auth_required, roles_required
from lp_builder.utils.json_fields import dump_json, load_json
from . import v1_bp


def _upsert(key, value):
    config = GlobalConfig.query.filter_by(key=key).first()
    if config is None:
        config = GlobalConfig(key=key)
        db.session.add(config)
    config.value = dump_json(value)
    return config


@v1_bp.route("/config/<key>", methods=["GET"])
def get_config(key):
    config = GlobalConfig.query.filter_by(key=key).first()
    return jsonify(load_json(config.value) if config else None)


@v1_bp.route("/config/<key>", methods=["POST"])
@auth_required()
@roles_required("admin")
def set_config(key):
    data = request.get_json(silent=True)
    if data is None:
        raise BadRequest("JSON body is required")

    config = _upsert(key, data)
    db.session.commit()

    return jsonify({"success": True, "key": config.key, "value": data})


@v1_bp.route("/admin/settings", methods=["GET"])
@auth_required()
@roles_required("admin")
def get_admin_settings():
    configs = GlobalConfig.query.order_by(GlobalConfig.key).all()
    return jsonify({c.key: load_json(c.value) for c in configs})


@v1_bp.route("/admin/settings", methods=["POST"])
@auth_required()
@roles_required("admin")
def save_admin_settings():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise BadRequest("Body must be an object of key/value pairs")

    for key, value in data.items():
        _upsert(key, value)
    db.session.commit()

    return jsonify({"success": True, "keys": sorted(data)})
