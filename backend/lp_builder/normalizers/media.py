from ._common import iso


def normalize_media(image):
    if image is None:
        return None

    return {
        "id": image.id,
        "userId": image.user_id,
        "filePath": image.file_path,
        "mime": image.mime,
        "width": image.width,
        "height": image.height,
        "prompt": image.prompt,
        "sourceType": image.source_type,
        "fileSize": image.file_size,
        "createdAt": iso(image.created_at),
    }
