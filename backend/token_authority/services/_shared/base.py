from __future__ import annotations

from token_authority.core import errors as api_errors
from token_authority.services._shared.errors import (
    ClientMisconfiguredError,
    InvalidClientError,
    ServiceError,
)
from token_authority.services._shared.ports.clock import Clock, SystemClock
from token_authority.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide helpers to run read-only and read-write units of work.
    * Own the clock used for every expiry comparison.
    * Centralize error translation from service errors to OAuth 2.0 errors.

    Notes
    -----
    - Services must never touch the global session; always use a Unit of Work.
    - Services never import Flask request objects; the API layer passes DTOs.
    """

    def __init__(self, *, clock: Clock | None = None) -> None:
        """
        Initialize the base service.

        :param clock: Time source; defaults to :class:`SystemClock`.
        :type clock: Clock | None
        """
        self.clock = clock or SystemClock()

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """
        Create a read-write Unit of Work.

        :returns: Read-write UoW instance.
        :rtype: SQLAlchemyUnitOfWork
        """
        return SQLAlchemyUnitOfWork()

    def ro_uow(self, *, enforce_db_readonly: bool = True) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Create a read-only Unit of Work.

        :param enforce_db_readonly: Apply ``SET TRANSACTION READ ONLY`` when supported.
        :returns: Read-only UoW instance.
        :rtype: SQLAlchemyReadOnlyUnitOfWork
        """
        return SQLAlchemyReadOnlyUnitOfWork(enforce_db_readonly=enforce_db_readonly)

    # -------------------------- Error handling ------------------------------

    @staticmethod
    def translate_exceptions(exc: Exception, *, realm: str = "token-authority") -> Exception:
        """
        Map service-level errors to OAuth 2.0 API errors.

        :param exc: Exception raised within the service.
        :param realm: Realm of the ``WWW-Authenticate`` challenge sent when
            HTTP Basic client authentication failed.
        :returns: Translated exception ready to be re-raised. Anything that is
            not a :class:`ServiceError` is returned untouched and surfaces as
            an infrastructure failure.
        """
        if isinstance(exc, InvalidClientError):
            headers = {}
            if exc.used_basic:
                headers["WWW-Authenticate"] = f'Basic realm="{realm}"'
            return api_errors.OAuth2Error(
                api_errors.OAuth2ErrorType.INVALID_CLIENT,
                exc.message,
                headers=headers,
            )

        if isinstance(exc, ClientMisconfiguredError):
            return api_errors.OAuth2Error(api_errors.OAuth2ErrorType.SERVER_ERROR)

        if isinstance(exc, ServiceError):
            return api_errors.OAuth2Error(api_errors.OAuth2ErrorType(exc.oauth_error), exc.message)

        return exc
