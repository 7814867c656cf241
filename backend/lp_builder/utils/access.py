from lp_builder.errors import Forbidden, NotFound
from lp_builder.extensions import db
from lp_builder.utils.decorators import current_user_settings


def get_owned_or_404(model, entity_id, label=None):
    """Load a row the caller owns; admins may load any row."""
    entity = db.session.get(model, entity_id)
    if entity is None:
        raise NotFound(f"{label or model.__name__} not found")

    settings = current_user_settings()
    if settings is None:
        raise Forbidden()
    if settings.is_admin or entity.is_owned_by(settings.user_id):
        return entity

    raise Forbidden()
