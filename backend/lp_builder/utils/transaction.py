from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError

from lp_builder.errors import Conflict
from lp_builder.extensions import db


@contextmanager
def transactional(conflict=None):
    """
    Commit the unit of work, or roll it back and re-raise.

    With ``conflict`` set, a unique constraint failure surfaces as a 409
    carrying that message.
    """
    try:
        yield
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        if conflict:
            raise Conflict(conflict)
        raise
    except Exception:
        db.session.rollback()
        raise
