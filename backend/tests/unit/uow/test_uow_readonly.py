import pytest
from sqlalchemy import text

from tests.factories.user import UserFactory
from token_authority.models.user import User
from token_authority.uow import SQLAlchemyReadOnlyUnitOfWork as ROuow


class TestSQLAlchemyReadOnlyUnitOfWork:
    def test_blocks_orm_flush_writes(self, app, db):
        """
        Ensure that attempting to flush ORM changes inside the RO UoW raises.
        """
        with ROuow() as uow, pytest.raises(RuntimeError, match="ORM flush blocked"):
            uow.session.add(UserFactory.build())
            uow.session.flush()

    def test_blocks_core_dml(self, app, db):
        """
        Ensure that raw SQL DML is blocked inside the RO UoW.
        """
        with ROuow() as uow, pytest.raises(RuntimeError, match="SQL statement blocked"):
            uow.session.execute(text("INSERT INTO token_blacklist (jti, token_type, expires_at) VALUES ('x', 'a', '2030-01-01')"))

    def test_allows_reads(self, app, db):
        UserFactory()

        with ROuow() as uow:
            assert uow.session.query(User).count() >= 1
            assert uow.users.get_username("missing") is None

    def test_guards_are_removed_on_exit(self, app, db, session):
        with ROuow():
            pass

        session.add(UserFactory.build())
        session.flush()  # no longer blocked

    def test_disallows_commit(self, app, db):
        """
        RO UoW must reject commit().
        """
        with ROuow() as uow, pytest.raises(RuntimeError):
            uow.commit()
