"""Generic repository base for SQLAlchemy 2.x.

This module centralizes persistence-only concerns shared by all repositories:
- Access to the session of the surrounding Unit of Work.
- Single-row fetch helper for ``select`` statements.
- No business logic, no commit/rollback: services own transactions through a
  Unit of Work.

Design decisions
----------------
* Repositories MUST remain thin and persistence-focused:
  - They never implement token policies (expiry, ownership, blacklist
    precedence); services do.
  - They never call commit/rollback; Services define the Unit of Work.
* Writes that must be atomic with other writes (revocation cascades) only
  ``flush()``; the surrounding Unit of Work decides the outcome.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar, cast

from sqlalchemy import Select
from sqlalchemy.orm import Session

from token_authority.core.extensions import db

E = TypeVar("E")  # SQLAlchemy mapped entity type


class BaseRepository(Generic[E]):
    """Generic, persistence-only repository for a single table.

    Subclasses MUST define ``model``, the SQLAlchemy mapped class.

    This class NEVER opens, commits or rolls back transactions.
    """

    #: SQLAlchemy mapped model (must be set by subclasses)
    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        """Initialise the repository with an optional SQLAlchemy session.

        When no explicit session is provided the repository falls back to the
        Flask-scoped session exposed by ``token_authority.core.extensions``.

        :param session: Session shared across the Unit of Work scope.
        :type session: :class:`sqlalchemy.orm.Session` | None
        """
        self._session: Session | None = session

    @property
    def session(self) -> Session:
        """Return the active SQLAlchemy session.

        :returns: Active session bound to the current Unit of Work.
        :rtype: :class:`sqlalchemy.orm.Session`
        """
        if self._session is not None:
            return self._session
        return cast(Session, db.session)

    @property
    def dialect_name(self) -> str:
        """Name of the dialect the session is bound to (``postgresql``, ``sqlite``...)."""
        return self.session.get_bind().dialect.name

    def _first(self, stmt: Select[Any]) -> E | None:
        """Execute ``stmt`` and return the first entity, or ``None``."""
        return cast(E | None, self.session.execute(stmt).scalars().first())

    # --------------------------------- Writes --------------------------------

    def add(self, instance: E) -> E:
        """Stage a new entity for persistence and flush to materialize the PK.

        :param instance: New entity instance.
        :returns: The same instance after ``flush()``.
        """
        self.session.add(instance)
        self.flush()
        return instance

    def flush(self) -> None:
        """Flush pending changes to the database without committing."""
        self.session.flush()
