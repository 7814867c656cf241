"""Supabase service-role client: object storage and the auth admin API."""
import logging
import re
import secrets
import time
from urllib.parse import unquote, urlparse

from flask import current_app
from supabase import create_client

from lp_builder.errors import ServiceUnavailable

logger = logging.getLogger(__name__)

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]")


def get_client():
    url = current_app.config.get("SUPABASE_URL")
    key = current_app.config.get("SUPABASE_SERVICE_ROLE_KEY")

    if not url or not key:
        raise ServiceUnavailable("Storage is not configured")

    client = current_app.extensions.get("supabase")
    if client is None:
        client = create_client(url, key)
        current_app.extensions["supabase"] = client
    return client


def sanitize_filename(filename):
    name = _UNSAFE.sub("_", filename or "file")
    return name.strip("._") or "file"


def unique_name(filename):
    return f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}-{sanitize_filename(filename)}"


def upload_bytes(data, filename, content_type):
    """Store ``data`` under a unique name and return its public URL."""
    bucket = current_app.config["SUPABASE_STORAGE_BUCKET"]
    path = unique_name(filename)
    store = get_client().storage.from_(bucket)

    store.upload(
        path,
        data,
        {"content-type": content_type, "cache-control": "3600", "upsert": "false"},
    )
    logger.info("Uploaded %s (%d bytes) to bucket %s", path, len(data), bucket)

    return store.get_public_url(path)


def path_from_public_url(url):
    bucket = current_app.config["SUPABASE_STORAGE_BUCKET"]
    marker = f"/object/public/{bucket}/"
    path = urlparse(url).path
    if marker not in path:
        return None
    return unquote(path.split(marker, 1)[1])


def remove(url):
    path = path_from_public_url(url)
    if not path:
        logger.warning("Not a storage URL, skipping removal: %s", url)
        return False

    bucket = current_app.config["SUPABASE_STORAGE_BUCKET"]
    get_client().storage.from_(bucket).remove([path])
    logger.info("Removed %s from bucket %s", path, bucket)
    return True


def list_auth_users(per_page=1000):
    """All Supabase auth users as plain dicts."""
    users = get_client().auth.admin.list_users(page=1, per_page=per_page)
    return [
        {
            "id": user.id,
            "email": user.email,
            "created_at": user.created_at,
            "last_sign_in_at": user.last_sign_in_at,
        }
        for user in users
    ]
