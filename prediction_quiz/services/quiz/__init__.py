"""Quiz domain services: state machine, scoring, participants and admin control.

Routes and socket handlers call into these modules; they keep the
persistence rules (one answer per question, one result per round) next to
the game rules instead of in the transport layer.
"""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError

from prediction_quiz import db
from prediction_quiz.errors import ConcurrentUpdate


def commit_or_conflict(on_integrity_error=None) -> None:
    """Commit the session, turning lost races into domain errors.

    A stale versioned row means another request won; a unique constraint
    violation is mapped to ``on_integrity_error`` when given.
    """
    try:
        db.session.commit()
    except StaleDataError as exc:
        db.session.rollback()
        raise ConcurrentUpdate() from exc
    except IntegrityError as exc:
        db.session.rollback()
        if on_integrity_error is not None:
            raise on_integrity_error from exc
        raise ConcurrentUpdate() from exc
