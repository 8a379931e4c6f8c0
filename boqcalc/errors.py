"""Error taxonomy shared by repositories, services and the web layer."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError


class BOQCalcError(Exception):
    """Base class for all BOQCalc business errors."""


class PreconditionFailed(BOQCalcError):
    """BOQ or quotation is not in the status the operation requires."""


class NotFound(BOQCalcError):
    """Requested entity does not exist."""


class ValidationFailed(BOQCalcError):
    """A business rule rejected the operation."""


class TransientIOFailure(BOQCalcError):
    """Underlying storage call failed; not retried."""


def with_context(err: BOQCalcError, context: str) -> BOQCalcError:
    """Return a copy of ``err`` (same class) with ``context`` prefixed to its message."""
    wrapped = type(err)(f"{context}: {err}")
    wrapped.__cause__ = err
    return wrapped


@contextmanager
def storage_errors(action: str) -> Iterator[None]:
    """Re-raise SQLAlchemy errors as :class:`TransientIOFailure` ("failed to <action>")."""
    try:
        yield
    except SQLAlchemyError as err:
        raise TransientIOFailure(f"failed to {action}") from err
