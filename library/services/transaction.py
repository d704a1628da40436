from contextlib import contextmanager

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from library.services.errors import LibraryError, StoreFailure


@contextmanager
def transaction(session, action: str, tag: str):
    """One unit of work: commit when the block finishes, roll back on any error.

    Domain errors are re-raised as they are; driver errors become a
    ``StoreFailure`` whose detail stays out of the primary message.
    """
    try:
        yield
        session.commit()
    except LibraryError as e:
        session.rollback()
        current_app.logger.warning(f"[{tag}] {action} rejected: {e.message}")
        raise
    except SQLAlchemyError as e:
        session.rollback()
        current_app.logger.exception(f"[{tag}] {action} failed: {e}")
        raise StoreFailure(f"Failed to {action}", detail=str(e)) from e
    except Exception:
        session.rollback()
        raise
