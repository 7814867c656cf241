from lp_builder.models.creative import Banner
from lp_builder.utils.json_fields import load_json
from ._common import iso
from .media import normalize_media


def normalize_creative(item):
    """Banner or Thumbnail; they differ only in platform/category."""
    data = {
        "id": item.id,
        "userId": item.user_id,
        "title": item.title,
        "width": item.width,
        "height": item.height,
        "presetName": item.preset_name,
        "prompt": item.prompt,
        "productInfo": item.product_info,
        "imageId": item.image_id,
        "image": normalize_media(item.image),
        "referenceImageUrl": item.reference_image_url,
        "status": item.status,
        "metadata": load_json(item.metadata_json),
        "masks": load_json(item.masks),
        "createdAt": iso(item.created_at),
        "updatedAt": iso(item.updated_at),
    }

    if isinstance(item, Banner):
        data["platform"] = item.platform
    else:
        data["category"] = item.category

    return data
