from lp_builder.utils.json_fields import load_json
from .media import normalize_media


def normalize_section(section, include_images=True):
    data = {
        "id": section.id,
        "role": section.role,
        "order": section.order,
        "imageId": section.image_id,
        "mobileImageId": section.mobile_image_id,
        "config": load_json(section.config),
        "boundaryOffsetTop": section.boundary_offset_top or 0,
        "boundaryOffsetBottom": section.boundary_offset_bottom or 0,
    }

    if include_images:
        data["image"] = normalize_media(section.image)
        data["mobileImage"] = normalize_media(section.mobile_image)

    return data
