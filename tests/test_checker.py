"""Tests for version comparison and manifest passes."""

from typing import Dict, Optional
from unittest.mock import AsyncMock, Mock

import pytest

from version_lens.core.checker import (
    VersionChecker,
    VersionInfo,
    build_report,
    group_by_latest_version,
)
from version_lens.core.parsers import Ecosystem, PackageIndex


def make_clients(latest: Dict[str, Optional[str]]) -> Dict[PackageIndex, Mock]:
    """Registry client doubles answering from one name -> version table."""

    async def get_latest_version(name):
        return latest.get(name)

    clients = {}
    for index in PackageIndex:
        client = Mock()
        client.get_latest_version = AsyncMock(side_effect=get_latest_version)
        client.close = AsyncMock()
        clients[index] = client
    return clients


class TestVersionInfo:
    """Test up-to-date verdicts."""

    def test_equal_versions(self):
        assert VersionInfo("requests", "2.31.0", "2.31.0").is_up_to_date

    def test_different_versions(self):
        assert not VersionInfo("axios", "1.5.0", "1.6.0").is_up_to_date

    def test_prerelease_is_not_equal(self):
        assert not VersionInfo("pkg", "1.0.0", "1.0.0rc1").is_up_to_date

    def test_comparison_is_textual(self):
        assert not VersionInfo("pkg", "1.0", "1.0.0").is_up_to_date

    def test_failed_lookup(self):
        assert not VersionInfo("pkg", "1.0.0").is_up_to_date

    @pytest.mark.parametrize("current,latest,kind", [
        ("1.5.0", "2.0.0", "major"),
        ("1.5.0", "1.6.0", "minor"),
        ("2.31.0", "2.31.1", "patch"),
        ("1.0.0", "1.0.0", "unknown"),
        ("2.0.0", "1.9.0", "unknown"),
        ("latest", "1.0.0", "unknown"),
    ])
    def test_update_kind(self, current, latest, kind):
        assert VersionInfo("pkg", current, latest).update_kind == kind


class TestReport:
    """Test report aggregation."""

    def test_build_report_splits_and_skips_failures(self):
        infos = [
            VersionInfo("a", "1.0.0", "1.0.0"),
            VersionInfo("b", "1.0.0", "2.0.0"),
            VersionInfo("c", "1.0.0", None),
        ]
        report = build_report(infos, source="package.json")

        assert [info.name for info in report.up_to_date] == ["a"]
        assert [info.name for info in report.needs_update] == ["b"]
        assert report.total == 2
        assert report.source == "package.json"

    def test_grouping_keeps_first_seen_order(self):
        infos = [
            VersionInfo("a", "1.0", "2.0"),
            VersionInfo("b", "1.0", "3.0"),
            VersionInfo("c", "1.5", "2.0"),
        ]
        groups = group_by_latest_version(infos)

        assert list(groups) == ["2.0", "3.0"]
        assert [info.name for info in groups["2.0"]] == ["a", "c"]


class TestVersionChecker:
    """Test whole manifest passes with stubbed registries."""

    def test_missing_client_is_rejected(self):
        clients = make_clients({})
        del clients[PackageIndex.RUBYGEMS]
        with pytest.raises(ValueError, match="RUBYGEMS"):
            VersionChecker(clients=clients)

    @pytest.mark.asyncio
    async def test_package_json_needs_update(self):
        clients = make_clients({"axios": "1.6.0"})
        checker = VersionChecker(clients=clients)
        text = '{\n  "dependencies": {\n    "axios": "^1.5.0"\n  },\n  "name": "app"\n}\n'

        report = await checker.check_text(text, "package.json")

        assert report.up_to_date == []
        [info] = report.needs_update
        assert (info.name, info.current_version, info.latest_version, info.line_number) == ("axios", "1.5.0", "1.6.0", 2)
        clients[PackageIndex.NPM].get_latest_version.assert_awaited_once_with("axios")

    @pytest.mark.asyncio
    async def test_requirements_up_to_date(self):
        checker = VersionChecker(clients=make_clients({"requests": "2.31.0"}))

        report = await checker.check_text("requests==2.31.0\n", "requirements.txt")

        assert [info.name for info in report.up_to_date] == ["requests"]
        assert report.needs_update == []

    @pytest.mark.asyncio
    async def test_pyproject_main_and_optional(self):
        clients = make_clients({"fastapi": "0.110.0", "pytest": "8.0.0"})
        checker = VersionChecker(clients=clients)
        text = (
            "[project]\n"
            'name = "app"\n'
            'dependencies = ["fastapi>=0.100.0"]\n'
            "\n"
            "[project.optional-dependencies]\n"
            'dev = ["pytest==8.0.0"]\n'
        )

        report = await checker.check_text(text, "pyproject.toml")

        assert [(info.name, info.current_version) for info in report.needs_update] == [("fastapi", "0.100.0")]
        assert [(info.name, info.line_number) for info in report.up_to_date] == [("pytest", 5)]
        looked_up = [call.args[0] for call in clients[PackageIndex.PYPI].get_latest_version.await_args_list]
        assert looked_up == ["fastapi", "pytest"]

    @pytest.mark.asyncio
    async def test_gemfile(self):
        clients = make_clients({"rails": "7.1.2"})
        checker = VersionChecker(clients=clients)

        report = await checker.check_text("source 'https://rubygems.org'\ngem 'rails', '~> 7.0.0'\n", "Gemfile")

        [info] = report.needs_update
        assert (info.name, info.current_version, info.latest_version) == ("rails", "7.0.0", "7.1.2")
        clients[PackageIndex.RUBYGEMS].get_latest_version.assert_awaited_once_with("rails")

    @pytest.mark.asyncio
    async def test_failed_lookup_is_left_out(self):
        checker = VersionChecker(clients=make_clients({"requests": "2.31.0"}))

        report = await checker.check_text("requests==2.31.0\nmissing==1.0\n", "requirements.txt")

        assert report.total == 1
        assert [info.name for info in report.up_to_date] == ["requests"]

    @pytest.mark.asyncio
    async def test_lookups_keep_document_order(self):
        checker = VersionChecker(clients=make_clients({"b": "1", "a": "1"}))

        infos = await checker.check_lines(["b==1", "a==2"], Ecosystem.REQUIREMENTS)

        assert [info.name for info in infos] == ["b", "a"]

    @pytest.mark.asyncio
    async def test_parser_state_is_reset_between_passes(self):
        checker = VersionChecker(clients=make_clients({}))
        checker.parse_lines(['"dependencies": {', '"left": "1.0.0"'], Ecosystem.PACKAGE_JSON)

        dependencies = checker.parse_lines(['"other": "2.0.0"'], Ecosystem.PACKAGE_JSON)

        assert dependencies == []

    @pytest.mark.asyncio
    async def test_unsupported_manifest(self):
        checker = VersionChecker(clients=make_clients({}))
        with pytest.raises(ValueError, match="Unsupported manifest"):
            await checker.check_text("[package]\n", "Cargo.toml")

    @pytest.mark.asyncio
    async def test_check_file(self, tmp_path):
        manifest = tmp_path / "requirements.txt"
        manifest.write_text("# pinned\nflask==3.0.0\n", encoding="utf-8")
        checker = VersionChecker(clients=make_clients({"flask": "3.0.2"}))

        report = await checker.check_file(manifest)

        [info] = report.needs_update
        assert info.line_number == 1
        assert report.source == str(manifest)

    @pytest.mark.asyncio
    async def test_close_closes_every_client(self):
        clients = make_clients({})
        async with VersionChecker(clients=clients):
            pass
        for client in clients.values():
            client.close.assert_awaited_once()
