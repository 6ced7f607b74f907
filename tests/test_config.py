"""Tests for settings, logging setup and manifest discovery."""

import logging
from pathlib import Path

import pytest

from version_lens.core.parsers import Ecosystem
from version_lens.utils.config import Settings, load_settings
from version_lens.utils.logging import PACKAGE_LOGGER, get_logger, setup_logging
from version_lens.utils.path_utils import ManifestFinder, PathFilter, find_manifests


class TestSettings:
    """Test settings defaults and validation."""

    def test_defaults(self):
        settings = Settings()
        assert settings.enable_changelog_cache is True
        assert settings.changelog_cache_ttl == 3600
        assert settings.debounce_interval == 0.3
        assert settings.verbose is False

    def test_negative_ttl(self):
        with pytest.raises(ValueError, match="changelog_cache_ttl"):
            Settings(changelog_cache_ttl=-1)

    def test_from_mapping_accepts_kebab_case(self):
        settings = Settings.from_mapping({"enable-changelog-cache": "off", "debounce-interval": "1.5", "unknown": 1})
        assert settings.enable_changelog_cache is False
        assert settings.debounce_interval == 1.5

    def test_invalid_boolean(self):
        with pytest.raises(ValueError, match="Invalid boolean"):
            Settings.from_mapping({"verbose": "maybe"})


class TestLoadSettings:
    """Test config file and environment layering."""

    def test_config_file(self, tmp_path):
        config = tmp_path / "pyproject.toml"
        config.write_text(
            "[tool.version-lens]\n"
            "enable-changelog-cache = false\n"
            "changelog-cache-ttl = 60\n",
            encoding="utf-8",
        )

        settings = load_settings(config, environ={})

        assert settings.enable_changelog_cache is False
        assert settings.changelog_cache_ttl == 60.0

    def test_missing_table_uses_defaults(self, tmp_path):
        config = tmp_path / "pyproject.toml"
        config.write_text('[project]\nname = "app"\n', encoding="utf-8")

        assert load_settings(config, environ={}) == Settings()

    def test_environment_overrides_file(self, tmp_path):
        config = tmp_path / "pyproject.toml"
        config.write_text("[tool.version-lens]\nchangelog-cache-ttl = 60\n", encoding="utf-8")

        settings = load_settings(config, environ={"VERSION_LENS_CHANGELOG_CACHE_TTL": "120"})

        assert settings.changelog_cache_ttl == 120.0

    def test_environment_only(self):
        settings = load_settings(environ={"VERSION_LENS_VERBOSE": "1"})
        assert settings.verbose is True


class TestLogging:
    """Test logging configuration."""

    def teardown_method(self):
        setup_logging()

    def test_verbose_enables_debug(self):
        setup_logging(verbose=True)
        assert logging.getLogger(PACKAGE_LOGGER).level == logging.DEBUG
        assert logging.getLogger("version_lens.checker").getEffectiveLevel() == logging.DEBUG

    def test_default_level_is_warning(self):
        setup_logging()
        assert logging.getLogger(PACKAGE_LOGGER).level == logging.WARNING

    def test_log_file_receives_module_records(self, tmp_path):
        log_file = tmp_path / "version-lens.log"
        setup_logging(verbose=True, log_file=log_file)

        get_logger("version_lens.checker").debug("Checking axios@1.5.0")

        assert "version_lens.checker - DEBUG - Checking axios@1.5.0" in log_file.read_text(encoding="utf-8")

    def test_log_file_is_replaced_on_reconfigure(self, tmp_path):
        first, second = tmp_path / "first.log", tmp_path / "second.log"
        setup_logging(log_file=first)
        setup_logging(log_file=second)

        get_logger("version_lens.cli").warning("Check failed")

        assert first.read_text(encoding="utf-8") == ""
        assert "Check failed" in second.read_text(encoding="utf-8")


class TestManifestFinder:
    """Test manifest discovery."""

    def test_finds_every_manifest_kind(self, tmp_path):
        (tmp_path / "requirements.txt").write_text("requests==2.31.0\n")
        (tmp_path / "web").mkdir()
        (tmp_path / "web" / "package.json").write_text("{}\n")
        (tmp_path / "Gemfile").write_text("gem 'rails', '7.0.0'\n")

        manifests = find_manifests(tmp_path)

        assert {manifest.ecosystem for manifest in manifests} == {
            Ecosystem.REQUIREMENTS,
            Ecosystem.PACKAGE_JSON,
            Ecosystem.GEMFILE,
        }
        assert [m.path for m in manifests] == sorted(m.path for m in manifests)

    def test_ignores_dependency_directories(self, tmp_path):
        nested = tmp_path / "node_modules" / "left-pad"
        nested.mkdir(parents=True)
        (nested / "package.json").write_text("{}\n")

        assert find_manifests(tmp_path) == []

    def test_custom_ignore_pattern(self, tmp_path):
        (tmp_path / "examples").mkdir()
        (tmp_path / "examples" / "requirements.txt").write_text("flask\n")

        assert find_manifests(tmp_path, ["*/examples/*"]) == []

    def test_single_file(self, tmp_path):
        manifest = tmp_path / "pyproject.toml"
        manifest.write_text("[project]\n")

        [found] = ManifestFinder().find_manifests(manifest)
        assert found.ecosystem is Ecosystem.PYPROJECT

    def test_missing_root(self, tmp_path):
        with pytest.raises(ValueError, match="does not exist"):
            find_manifests(tmp_path / "missing")

    def test_path_filter(self):
        path_filter = PathFilter()
        assert path_filter.is_ignored(Path("/app/.venv/lib/requirements.txt"))
        assert not path_filter.is_ignored(Path("/app/requirements.txt"))
