from flask import current_app, jsonify, request
from sqlalchemy import or_

from lp_builder.application.usage import check_upload_limit
from lp_builder.clients import storage
from lp_builder.errors import BadRequest, Conflict, PaymentRequired
from lp_builder.extensions import db
from lp_builder.models.creative import Banner, Thumbnail
from lp_builder.models.lp_template import LpTemplateSection
from lp_builder.models.media_image import MediaImage, SOURCE_UPLOAD
from lp_builder.models.page_section import PageSection
from lp_builder.normalizers.media import normalize_media
from lp_builder.utils.access import get_owned_or_404
from lp_builder.utils.decorators import auth_required, current_user_id
from . import v1_bp


@v1_bp.route("/upload", methods=["POST"])
@auth_required(optional=True)
def upload():
    file = request.files.get("file")
    if file is None or not file.filename:
        raise BadRequest("No file uploaded")

    mime = file.mimetype or "application/octet-stream"
    if not mime.startswith("image/"):
        raise BadRequest("Only image uploads are supported")

    user_id = current_user_id()
    if user_id:
        check = check_upload_limit(user_id)
        if not check.allowed:
            raise PaymentRequired(check.reason, **check.to_dict())

    data = file.read()
    public_url = storage.upload_bytes(data, file.filename, mime)

    image = MediaImage(
        user_id=user_id,
        file_path=public_url,
        mime=mime,
        source_type=SOURCE_UPLOAD,
        file_size=len(data),
    )
    db.session.add(image)
    db.session.commit()

    current_app.logger.info("Media %s uploaded by %s", image.id, user_id or "anonymous")
    return jsonify(normalize_media(image)), 201


@v1_bp.route("/media", methods=["GET"])
@auth_required(optional=True)
def list_media():
    user_id = current_user_id()
    if not user_id:
        return jsonify([])

    # Images uploaded before sign-in are claimed by the first caller
    claimed = MediaImage.query.filter(MediaImage.user_id.is_(None)).update(
        {MediaImage.user_id: user_id}, synchronize_session=False
    )
    if claimed:
        db.session.commit()
        current_app.logger.info("Claimed %d orphaned images for %s", claimed, user_id)

    images = (
        MediaImage.query.filter_by(user_id=user_id)
        .order_by(MediaImage.created_at.desc())
        .all()
    )
    return jsonify([normalize_media(i) for i in images])


def _in_use(image_id):
    for model in (PageSection, LpTemplateSection):
        shown = or_(model.image_id == image_id, model.mobile_image_id == image_id)
        if model.query.filter(shown).first() is not None:
            return True

    return any(
        model.query.filter_by(image_id=image_id).first() is not None
        for model in (Banner, Thumbnail)
    )


@v1_bp.route("/media/<image_id>", methods=["DELETE"])
@auth_required()
def delete_media(image_id):
    image = get_owned_or_404(MediaImage, image_id, "Image")

    if _in_use(image.id):
        raise Conflict("Image is still used by a page, template or creative")

    storage.remove(image.file_path)
    db.session.delete(image)
    db.session.commit()

    current_app.logger.info("Media %s deleted by %s", image_id, current_user_id())
    return jsonify({"success": True})
