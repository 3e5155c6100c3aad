"""Unit tests for ReportingConfig and the storage factory."""

from __future__ import annotations

import typing as typ
from pathlib import Path
from unittest import mock

import pytest

from peppol_support.common.outcome import Outcome
from peppol_support.reporting import (
    ReportingConfig,
    ReportingConfigError,
    StorageBackend,
    create_report_storage,
)
from peppol_support.storage import (
    FilesystemReportStorage,
    MongoReportStorage,
    SQLReportStorage,
    UnsupportedDatabaseError,
)

if typ.TYPE_CHECKING:
    from peppol_support.reporting import ReportData

_ENV_VARS = (
    "PEPPOL_REPORT_STORAGE",
    "PEPPOL_REPORT_DIR",
    "PEPPOL_REPORT_MONGODB_URL",
    "PEPPOL_REPORT_MONGODB_DATABASE",
    "PEPPOL_REPORT_DATABASE_URL",
    "PEPPOL_REPORT_DATABASE_SCHEMA",
    "PEPPOL_REPORT_MIGRATE",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove every reporting variable from the environment."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestReportingConfig:
    """Tests for the ReportingConfig dataclass."""

    def test_file_backend_is_default(self) -> None:
        """The filesystem backend is selected unless configured otherwise."""
        config = ReportingConfig(report_dir=Path("/srv/reports"))
        assert config.storage_backend is StorageBackend.FILE
        assert not config.migrate

    @pytest.mark.parametrize(
        ("kwargs", "missing"),
        [
            pytest.param({}, "PEPPOL_REPORT_DIR", id="file"),
            pytest.param(
                {
                    "storage_backend": StorageBackend.MONGODB,
                    "mongodb_database": "peppol",
                },
                "PEPPOL_REPORT_MONGODB_URL",
                id="mongodb-url",
            ),
            pytest.param(
                {
                    "storage_backend": StorageBackend.MONGODB,
                    "mongodb_url": "mongodb://localhost",
                },
                "PEPPOL_REPORT_MONGODB_DATABASE",
                id="mongodb-database",
            ),
            pytest.param(
                {"storage_backend": StorageBackend.SQL},
                "PEPPOL_REPORT_DATABASE_URL",
                id="sql",
            ),
        ],
    )
    def test_backend_settings_are_required(
        self, kwargs: dict[str, object], missing: str
    ) -> None:
        """Each backend demands its own connection settings."""
        with pytest.raises(ReportingConfigError, match=missing):
            ReportingConfig(**kwargs)


class TestFromEnv:
    """Tests for ``ReportingConfig.from_env``."""

    @pytest.mark.parametrize(
        ("env_vars", "expected"),
        [
            pytest.param(
                {"PEPPOL_REPORT_DIR": "/var/lib/peppol/reports"},
                ReportingConfig(report_dir=Path("/var/lib/peppol/reports")),
                id="file-default",
            ),
            pytest.param(
                {
                    "PEPPOL_REPORT_STORAGE": " MongoDB ",
                    "PEPPOL_REPORT_MONGODB_URL": "mongodb://db:27017",
                    "PEPPOL_REPORT_MONGODB_DATABASE": "peppol",
                },
                ReportingConfig(
                    storage_backend=StorageBackend.MONGODB,
                    mongodb_url="mongodb://db:27017",
                    mongodb_database="peppol",
                ),
                id="mongodb",
            ),
            pytest.param(
                {
                    "PEPPOL_REPORT_STORAGE": "sql",
                    "PEPPOL_REPORT_DATABASE_URL": "postgresql+psycopg://db/peppol",
                    "PEPPOL_REPORT_DATABASE_SCHEMA": "reporting",
                    "PEPPOL_REPORT_MIGRATE": "yes",
                },
                ReportingConfig(
                    storage_backend=StorageBackend.SQL,
                    database_url="postgresql+psycopg://db/peppol",
                    database_schema="reporting",
                    migrate=True,
                ),
                id="sql",
            ),
        ],
    )
    def test_from_env_configuration(
        self,
        clean_env: pytest.MonkeyPatch,
        env_vars: dict[str, str],
        expected: ReportingConfig,
    ) -> None:
        """from_env reads environment variables correctly."""
        for key, value in env_vars.items():
            clean_env.setenv(key, value)

        assert ReportingConfig.from_env() == expected

    def test_invalid_backend_lists_options(self, clean_env: pytest.MonkeyPatch) -> None:
        """Unknown backends are rejected with the supported options."""
        clean_env.setenv("PEPPOL_REPORT_STORAGE", "oracle")
        with pytest.raises(ReportingConfigError, match="'file', 'mongodb', 'sql'"):
            ReportingConfig.from_env()

    def test_missing_report_dir(self, clean_env: pytest.MonkeyPatch) -> None:
        """The default backend needs a directory."""
        with pytest.raises(ReportingConfigError, match="PEPPOL_REPORT_DIR"):
            ReportingConfig.from_env()

    @pytest.mark.parametrize("raw", ["maybe", "2"])
    def test_invalid_boolean(self, clean_env: pytest.MonkeyPatch, raw: str) -> None:
        """Boolean variables accept only the usual spellings."""
        clean_env.setenv("PEPPOL_REPORT_DIR", "/srv/reports")
        clean_env.setenv("PEPPOL_REPORT_MIGRATE", raw)
        with pytest.raises(ReportingConfigError, match="must be a boolean"):
            ReportingConfig.from_env()

    @pytest.mark.parametrize("raw", ["0", "off", "False", ""])
    def test_false_booleans(self, clean_env: pytest.MonkeyPatch, raw: str) -> None:
        """False spellings and blanks disable migration."""
        clean_env.setenv("PEPPOL_REPORT_DIR", "/srv/reports")
        clean_env.setenv("PEPPOL_REPORT_MIGRATE", raw)
        assert not ReportingConfig.from_env().migrate


class TestFromYaml:
    """Tests for ``ReportingConfig.from_yaml``."""

    def test_loads_sql_settings(self, tmp_path: Path) -> None:
        """YAML files select the backend and its settings."""
        path = tmp_path / "reporting.yaml"
        path.write_text(
            "storage: sql\n"
            "database_url: sqlite:///reports.db\n"
            "database_schema: main\n"
            "migrate: true\n",
            encoding="utf-8",
        )

        config = ReportingConfig.from_yaml(path)

        assert config.storage_backend is StorageBackend.SQL
        assert config.database_url == "sqlite:///reports.db"
        assert config.database_schema == "main"
        assert config.migrate

    def test_loads_file_settings(self, tmp_path: Path) -> None:
        """The report directory becomes a Path."""
        path = tmp_path / "reporting.yaml"
        path.write_text("report_dir: /srv/reports\n", encoding="utf-8")
        assert ReportingConfig.from_yaml(str(path)).report_dir == Path("/srv/reports")

    @pytest.mark.parametrize(
        ("content", "message"),
        [
            pytest.param("", "is empty", id="empty"),
            pytest.param("storage: [file\n", "failed to parse YAML", id="malformed"),
            pytest.param(
                "report_dir: /srv\nsurprise: 1\n",
                "schema validation failed",
                id="unknown-key",
            ),
            pytest.param(
                "report_dir: /srv\nmigrate: perhaps\n",
                "schema validation failed",
                id="wrong-type",
            ),
            pytest.param("storage: ftp\n", "Invalid PEPPOL_REPORT_STORAGE", id="backend"),
        ],
    )
    def test_invalid_files(self, tmp_path: Path, content: str, message: str) -> None:
        """Broken configuration files raise ReportingConfigError."""
        path = tmp_path / "reporting.yaml"
        path.write_text(content, encoding="utf-8")
        with pytest.raises(ReportingConfigError, match=message):
            ReportingConfig.from_yaml(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        """Unreadable files raise ReportingConfigError."""
        with pytest.raises(ReportingConfigError, match="failed to parse YAML"):
            ReportingConfig.from_yaml(tmp_path / "absent.yaml")


class TestCreateReportStorage:
    """Tests for ``create_report_storage``."""

    def test_file_backend(self, tmp_path: Path, report_data: ReportData) -> None:
        """The filesystem backend writes below the configured directory."""
        config = ReportingConfig(report_dir=tmp_path)
        with create_report_storage(config) as storage:
            assert isinstance(storage, FilesystemReportStorage)
            assert storage.base_dir == tmp_path
            assert storage.store_report(report_data) is Outcome.SUCCESS

    def test_reads_environment_by_default(
        self, clean_env: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        """Without a config the environment decides."""
        clean_env.setenv("PEPPOL_REPORT_DIR", str(tmp_path))
        opened = create_report_storage()
        assert isinstance(opened.storage, FilesystemReportStorage)

    def test_sql_backend_migrates(self, tmp_path: Path, report_data: ReportData) -> None:
        """With migrate set the tables exist before the first insert."""
        config = ReportingConfig(
            storage_backend=StorageBackend.SQL,
            database_url=f"sqlite:///{tmp_path / 'reports.db'}",
            migrate=True,
        )
        with create_report_storage(config) as storage:
            assert isinstance(storage, SQLReportStorage)
            assert storage.store_report(report_data) is Outcome.SUCCESS
            assert storage.fetch_reports() == [report_data]

    def test_sql_backend_rejects_unsupported_database(self) -> None:
        """Only supported databases can be opened."""
        config = ReportingConfig(
            storage_backend=StorageBackend.SQL,
            database_url="oracle+oracledb://u:p@db/peppol",
        )
        with pytest.raises(UnsupportedDatabaseError):
            create_report_storage(config)

    def test_mongodb_backend_closes_client(self) -> None:
        """Leaving the block closes the MongoDB client."""
        config = ReportingConfig(
            storage_backend=StorageBackend.MONGODB,
            mongodb_url="mongodb://localhost:27017",
            mongodb_database="peppol",
        )
        with mock.patch("peppol_support.storage.mongodb.pymongo.MongoClient") as cls:
            with create_report_storage(config) as storage:
                assert isinstance(storage, MongoReportStorage)
            cls.return_value.close.assert_called_once_with()
