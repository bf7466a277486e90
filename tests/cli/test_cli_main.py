"""Tests for top-level CLI commands: help, version, init, reset and map-type."""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from schemamap.config import ConfigPaths, load_encryption_key
from schemamap.encryption import EncryptionKey
from schemamap_cli.main import app

runner = CliRunner()


def test_cli_help() -> None:
    """Test CLI help command."""
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "Snowflake" in result.output
    for command in ["init", "map", "refresh", "generate-ddl", "validate", "map-type", "mappings"]:
        assert command in result.output


def test_cli_version() -> None:
    """Test CLI version command."""
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert "schemamap version 0.1.0" in result.output


def test_generate_ddl_help() -> None:
    result = runner.invoke(app, ["generate-ddl", "--help"])
    assert result.exit_code == 0
    assert "Generate Snowflake DDL from a mapping" in result.output


class TestInit:
    """Tests for the init command"""

    def test_init_global(self, home_dir: Path) -> None:
        result = runner.invoke(app, ["init"])
        assert result.exit_code == 0
        assert "Initialized global configuration" in result.output
        assert (home_dir / ".schemamap" / "key").is_file()

    def test_init_local(self, home_dir: Path) -> None:
        result = runner.invoke(app, ["init", "--location", "local"])
        assert result.exit_code == 0
        assert (Path.cwd() / ".schemamap" / "key").is_file()
        assert not (home_dir / ".schemamap").exists()

    def test_init_twice_needs_force(self, installation: ConfigPaths, key: EncryptionKey) -> None:
        result = runner.invoke(app, ["init"])
        assert result.exit_code == 1
        assert "already exists" in result.output
        assert "--force" in result.output
        assert load_encryption_key(installation) == key

        result = runner.invoke(app, ["init", "--force"])
        assert result.exit_code == 0
        assert "Replacing the existing key" in result.output
        assert load_encryption_key(installation) != key

    def test_init_with_passphrase(self, home_dir: Path) -> None:
        result = runner.invoke(app, ["init", "--passphrase-prompt"], input="open sesame\nopen sesame\n")
        assert result.exit_code == 0
        paths = ConfigPaths.for_dir(home_dir / ".schemamap")
        assert load_encryption_key(paths) == EncryptionKey.from_passphrase("open sesame")


class TestReset:
    """Tests for the reset command"""

    def test_reset_with_yes(self, installation: ConfigPaths) -> None:
        result = runner.invoke(app, ["reset", "--yes"])
        assert result.exit_code == 0
        assert not installation.config_dir.exists()

    def test_reset_declined(self, installation: ConfigPaths) -> None:
        result = runner.invoke(app, ["reset"], input="n\n")
        assert result.exit_code == 1
        assert installation.config_dir.exists()

    def test_reset_without_config(self, home_dir: Path) -> None:
        result = runner.invoke(app, ["reset", "--yes"])
        assert result.exit_code == 1
        assert "No configuration" in result.output


@pytest.mark.usefixtures("home_dir")
class TestMapType:
    """Tests for the map-type command"""

    def test_exact_mapping(self) -> None:
        result = runner.invoke(app, ["map-type", "postgresql", "numeric(10,2)"])
        assert result.exit_code == 0
        assert result.output.strip() == "NUMBER(10,2)"

    def test_identity(self) -> None:
        result = runner.invoke(app, ["map-type", "sqlserver", "int", "--identity"])
        assert result.exit_code == 0
        assert "INTEGER IDENTITY(1,1)" in result.output

    def test_declared_length(self) -> None:
        result = runner.invoke(app, ["map-type", "mysql", "varchar", "--length", "64"])
        assert result.exit_code == 0
        assert "VARCHAR(64)" in result.output

    def test_lossy_mapping_warns(self) -> None:
        result = runner.invoke(app, ["map-type", "mysql", "bigint unsigned"])
        assert result.exit_code == 0
        assert "NUMBER(20,0)" in result.output
        assert "Warning" in result.output

    def test_unmapped(self) -> None:
        result = runner.invoke(app, ["map-type", "postgresql", "tsvector"])
        assert result.exit_code == 0
        assert "VARCHAR" in result.output
        assert "unmapped source type 'tsvector'" in result.output

    def test_unknown_engine(self) -> None:
        result = runner.invoke(app, ["map-type", "oracle", "number"])
        assert result.exit_code == 2


class TestLogging:
    """Tests for per-run logging set up by the root callback"""

    def test_log_file_created_in_installation(self, installation: ConfigPaths) -> None:
        result = runner.invoke(app, ["mappings", "list"])
        assert result.exit_code == 0
        assert list(installation.logs_dir.glob("schemamap-*.log"))

    def test_invalid_settings_are_reported(self, installation: ConfigPaths) -> None:
        installation.settings_file.write_text("logging:\n  level: LOUD\n", encoding="utf-8")
        result = runner.invoke(app, ["mappings", "list"])
        assert result.exit_code == 0
        assert "logging.level" in result.output

    def test_unreadable_settings_fall_back_to_defaults(self, installation: ConfigPaths) -> None:
        installation.settings_file.write_text("logging: [", encoding="utf-8")
        result = runner.invoke(app, ["mappings", "list"])
        assert result.exit_code == 0
        assert "using default settings" in result.output
