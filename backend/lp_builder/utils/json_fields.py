import json
import logging

logger = logging.getLogger(__name__)


def load_json(value, default=None):
    """Parse a JSON text column; malformed or empty values yield ``default``."""
    if value is None or value == "":
        return default
    try:
        return json.loads(value)
    except (TypeError, ValueError):
        logger.warning("Discarding malformed JSON column value")
        return default


def dump_json(value):
    if value is None:
        return None
    return json.dumps(value, ensure_ascii=False)
