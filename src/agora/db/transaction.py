"""All-or-nothing commit helper used by every multi-record mutation."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from agora.core.errors import ConflictError, ServiceUnavailableError

logger = logging.getLogger(__name__)


@contextmanager
def atomic(db: Session, *, conflict_detail: str = "Resource already exists") -> Iterator[Session]:
    """Run the enclosed block as one transaction.

    Everything staged on ``db`` inside the block is committed together when it
    exits cleanly. Any exception rolls the whole unit back. A unique or check
    constraint violation at commit time (for instance a racing duplicate
    insert) is reported as ``ConflictError(conflict_detail)``. A flush that
    finds its row already changed or deleted by another transaction is also a
    ``ConflictError``; a lost connection is ``ServiceUnavailableError``.
    """
    try:
        yield db
        db.commit()
    except IntegrityError as err:
        db.rollback()
        logger.info("Constraint violation rolled back: %s", err.orig)
        raise ConflictError(conflict_detail) from err
    except StaleDataError as err:
        db.rollback()
        logger.info("Concurrent modification rolled back: %s", err)
        raise ConflictError("Resource changed by another request, try again") from err
    except OperationalError as err:
        db.rollback()
        logger.error("Database unavailable, transaction aborted: %s", err.orig)
        raise ServiceUnavailableError("Database temporarily unavailable") from err
    except Exception:
        db.rollback()
        raise
