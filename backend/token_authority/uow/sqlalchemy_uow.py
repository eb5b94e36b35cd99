"""
SQLAlchemy implementation of UnitOfWork for Flask.
"""

from __future__ import annotations

import logging

from sqlalchemy import event, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import InvalidRequestError
from sqlalchemy.orm import Session, SessionTransaction

from token_authority.core.extensions import db
from token_authority.repositories import (
    AccessTokenRepository,
    AuditLogRepository,
    OAuthClientRepository,
    RefreshTokenRepository,
    TokenBlacklistRepository,
    UserRepository,
)
from token_authority.uow.base import UnitOfWork

log = logging.getLogger(__name__)


class SQLAlchemyRepositoryContainer:
    """Provide repository instances that share a SQLAlchemy session."""

    def __init__(self, *, session: Session) -> None:
        self.session = session
        self.clients = OAuthClientRepository(session=self.session)
        self.access_tokens = AccessTokenRepository(session=self.session)
        self.refresh_tokens = RefreshTokenRepository(session=self.session)
        self.blacklist = TokenBlacklistRepository(session=self.session)
        self.audit_logs = AuditLogRepository(session=self.session)
        self.users = UserRepository(session=self.session)


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    SQLAlchemy-backed UoW using the Flask-scoped session.

    Every write staged by the repositories during the ``with`` block is
    committed together on a clean exit, or rolled back together when the block
    raises. Revocation cascades rely on this to stay all-or-nothing.
    """

    def __init__(self) -> None:
        super().__init__(session=db.session)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        # No-op: the session is lazily started on the first statement.
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            try:
                self.commit()
            except Exception:
                self.rollback()
                raise
        else:
            self.rollback()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-only Unit of Work backed by the Flask-scoped SQLAlchemy session.

    This UoW:
    - Applies database-level ``SET TRANSACTION READ ONLY`` on PostgreSQL and
      MySQL/MariaDB when it owns the transaction.
    - Installs portable write guards (ORM ``before_flush`` and cursor-level
      DML/DDL detection) for the duration of the block.
    - Always rolls back the transaction it owns on exit.
    - Disallows ``commit()``.

    Parameters
    ----------
    isolation_level:
        Optional ``SET TRANSACTION ISOLATION LEVEL`` value, e.g.
        ``"READ COMMITTED"``. Ignored on SQLite.
    enforce_db_readonly:
        Apply ``SET TRANSACTION READ ONLY`` where supported (default ``True``).

    Notes
    -----
    If the session already has a transaction in progress the UoW attaches to
    it instead of failing: guards are installed but transaction-level
    directives are skipped and the outer owner decides how it ends.
    """

    _WRITE_PREFIXES = (
        "insert",
        "update",
        "delete",
        "merge",
        "alter",
        "drop",
        "truncate",
        "create",
        "replace",
        "grant",
        "revoke",
    )
    _READONLY_DIALECTS = ("postgresql", "mysql", "mariadb")

    def __init__(
        self,
        *,
        isolation_level: str | None = None,
        enforce_db_readonly: bool = True,
    ) -> None:
        super().__init__(session=db.session)
        self.isolation_level = isolation_level
        self.enforce_db_readonly = enforce_db_readonly

        self._conn: Connection | None = None
        self._txn_ctx: SessionTransaction | None = None
        self._listeners_installed = False

    # ----------------------------- Context Manager -----------------------------

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        self._txn_ctx = None
        try:
            txn_ctx = self.session.begin()
            txn_ctx.__enter__()
            self._txn_ctx = txn_ctx
        except InvalidRequestError:
            # Session already inside a transaction (autobegin / outer fixture): attach.
            pass

        self._conn = self.session.connection()
        self._install_listeners()

        if self._txn_ctx is not None and self._conn.dialect.name in self._READONLY_DIALECTS:
            if self.isolation_level:
                self.session.execute(text(f"SET TRANSACTION ISOLATION LEVEL {self.isolation_level.upper()}"))
            if self.enforce_db_readonly:
                self.session.execute(text("SET TRANSACTION READ ONLY"))

        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        """Always remove guards. Roll back only if we own the transaction."""
        try:
            if self._txn_ctx is not None:
                try:
                    self.session.rollback()
                finally:
                    self._txn_ctx.__exit__(exc_type, exc, tb)
                    self._txn_ctx = None
        finally:
            self._remove_listeners()
            self._conn = None

    # ----------------------------- Public API ---------------------------------

    def commit(self) -> None:
        """
        Disallow commit in read-only Unit of Work.

        :raises RuntimeError: always, to prevent accidental writes.
        """
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()

    # ----------------------------- Guards & Listeners --------------------------

    def _install_listeners(self) -> None:
        """Install ORM/db-level listeners to prevent any write attempt."""
        if self._listeners_installed:
            return

        def _before_flush(session, flush_context, instances):
            if session.new or session.dirty or session.deleted:
                raise RuntimeError(
                    "Read-only UnitOfWork: ORM flush blocked (new/dirty/deleted objects present)."
                )

        def _before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
            first_token = statement.lstrip().split(None, 1)[0].lower() if statement else ""
            if first_token.startswith(self._WRITE_PREFIXES):
                raise RuntimeError(f"Read-only UnitOfWork: SQL statement blocked: {first_token.upper()}")

        event.listen(self.session, "before_flush", _before_flush)
        target = self._conn if self._conn is not None else self.session.get_bind()
        event.listen(target, "before_cursor_execute", _before_cursor_execute)

        self._ro_before_flush = _before_flush
        self._ro_before_cursor_execute = _before_cursor_execute
        self._ro_target = target
        self._listeners_installed = True

    def _remove_listeners(self) -> None:
        if not self._listeners_installed:
            return
        try:
            event.remove(self.session, "before_flush", self._ro_before_flush)
        finally:
            if event.contains(self._ro_target, "before_cursor_execute", self._ro_before_cursor_execute):
                event.remove(self._ro_target, "before_cursor_execute", self._ro_before_cursor_execute)
            self._listeners_installed = False
