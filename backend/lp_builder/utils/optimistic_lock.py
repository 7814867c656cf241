from datetime import timezone

from dateutil.parser import parse, ParserError
from flask import request

from lp_builder.errors import BadRequest, Conflict


def normalize_ts(ts):
    """Ensure datetime is timezone-aware, defaulting naive values to UTC."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts


def enforce_optimistic_lock(entity):
    """
    Enforces optimistic locking using the If-Unmodified-Since header.
    Raises Conflict if the entity has been modified since.
    """
    client_ts = request.headers.get("If-Unmodified-Since")
    if not client_ts:
        return

    try:
        client_ts = normalize_ts(parse(client_ts))
    except (ParserError, ValueError, OverflowError):
        raise BadRequest("Invalid If-Unmodified-Since header")

    if entity.updated_at is None:
        return

    # HTTP dates carry whole seconds only
    server_ts = normalize_ts(entity.updated_at).replace(microsecond=0)

    if server_ts > client_ts:
        raise Conflict("Conflict detected. Resource has been modified.")
