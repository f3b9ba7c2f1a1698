import contextlib
from typing import Callable, Optional

from sqlalchemy.orm import Session

from database.database import SessionLocal
from database.repositories.creator import DEFAULT_SEARCH_CAST, CreatorRepository


@contextlib.contextmanager
def creator_uow(
    session_factory: Optional[Callable[[], Session]] = None,
    search_cast: Optional[str] = DEFAULT_SEARCH_CAST
):
    """Per-unit-of-work transaction scope.

    Yields a CreatorRepository bound to a fresh Session. Commits on success,
    rolls back on exception, always closes.

    Usage:
        with creator_uow() as repo:
            repo.save_creator_embedding(creator_id, vector)
        # commit happens automatically on successful exit
    """
    session = (session_factory or SessionLocal)()
    try:
        repo = CreatorRepository(session, search_cast=search_cast)
        yield repo
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
