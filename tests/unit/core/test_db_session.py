"""Tests for the database session service."""

import pytest
from sqlmodel import select

from src.luxgold.core.services.database.db_manage import DbManageService
from src.luxgold.core.services.database.db_session import DbSessionService, describe_database_target
from src.luxgold.entities.catalog.category import CategoryTable
from src.luxgold.runtime.config.config_data import ConfigData, DatabaseConfig
from src.luxgold.runtime.context import with_context


class TestSessionScope:
    """Test the transactional session scope."""

    def test_commits_on_success(self, db_service):
        with db_service.session_scope() as session:
            session.add(CategoryTable(name="Rings", slug="rings"))

        with db_service.session_scope() as session:
            assert session.exec(select(CategoryTable)).one().slug == "rings"

    def test_rolls_back_on_error(self, db_service):
        with pytest.raises(RuntimeError):
            with db_service.session_scope() as session:
                session.add(CategoryTable(name="Rings", slug="rings"))
                session.flush()
                raise RuntimeError("boom")

        with db_service.session_scope() as session:
            assert session.exec(select(CategoryTable)).all() == []


class TestHealth:
    """Test health and pool reporting."""

    def test_health_check(self, db_service):
        assert db_service.health_check() is True

    def test_health_check_failure(self, tmp_path):
        """An unreachable database reports unhealthy instead of raising."""
        missing = tmp_path / "missing" / "db.sqlite"
        override = ConfigData(database=DatabaseConfig(url=f"sqlite:///{missing}"))
        with with_context(override):
            service = DbSessionService()
        assert service.health_check() is False

    def test_pool_status_keys(self, db_service):
        assert set(db_service.get_pool_status()) == {"size", "checked_in", "checked_out", "overflow"}


class TestConfiguredEngine:
    """Test engines built from configuration."""

    def test_sqlite_file_database(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'catalog.db'}"
        with with_context(ConfigData(database=DatabaseConfig(url=url))):
            service = DbSessionService()
            DbManageService(service).create_all()
        try:
            with service.session_scope() as session:
                session.add(CategoryTable(name="Rings", slug="rings"))
            assert service.health_check()
        finally:
            service.dispose()


class TestDescribeTarget:
    """Test redaction of database URLs for logs."""

    def test_postgres_url_hides_credentials(self):
        target = describe_database_target("postgresql://user:secret@db:5432/catalog")
        assert target == "postgresql://db:5432/catalog"
        assert "secret" not in target

    def test_sqlite_memory(self):
        assert describe_database_target("sqlite://") == "sqlite:///:memory:"

    def test_unparsable(self):
        assert describe_database_target("not a url") == "<unparsable>"
