from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from app.core.config import settings
from app.core.errors import ConcurrentModificationError, DuplicateResourceError

engine_kwargs: dict[str, object] = {
    # Detect and recover from stale pooled connections.
    "pool_pre_ping": True,
    "echo": settings.db_echo,
}

if not settings.database_url.lower().startswith("sqlite"):
    # Tune SQLAlchemy pool for networked databases (e.g., Postgres).
    engine_kwargs.update(
        {
            "pool_size": settings.db_pool_size,
            "max_overflow": settings.db_max_overflow,
            "pool_timeout": settings.db_pool_timeout_seconds,
            "pool_recycle": settings.db_pool_recycle_seconds,
        }
    )

engine = create_engine(settings.database_url, **engine_kwargs)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# SQLSTATE for unique_violation on Postgres.
UNIQUE_VIOLATION = "23505"


def is_unique_violation(exc: IntegrityError) -> bool:
    code = getattr(exc.orig, "sqlstate", None) or getattr(exc.orig, "pgcode", None)
    if code is not None:
        return code == UNIQUE_VIOLATION
    return "unique constraint" in str(exc.orig).lower()


@contextmanager
def unit_of_work(db: Session) -> Iterator[Session]:
    """Commit everything written inside the block, or nothing.

    Version-counter mismatches and unique-constraint races detected by the
    database surface as domain errors after the rollback. Other integrity
    failures (foreign keys, check constraints) propagate unchanged.
    """
    try:
        yield db
        db.commit()
    except StaleDataError as exc:
        db.rollback()
        raise ConcurrentModificationError(
            "Record was modified by another transaction; reload and retry"
        ) from exc
    except IntegrityError as exc:
        db.rollback()
        if is_unique_violation(exc):
            raise DuplicateResourceError("Write conflicts with an existing record") from exc
        raise
    except Exception:
        db.rollback()
        raise
