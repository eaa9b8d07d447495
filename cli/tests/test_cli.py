"""Tests for cli/cli/app.py -- the featuregate CLI application.

Uses typer.testing.CliRunner to invoke each command against the built-in
feature catalogue and small feed files written to a temporary directory.
"""

from __future__ import annotations

import json
import time
from pathlib import Path

import pytest
from pydantic import ValidationError
from typer.testing import CliRunner

from cli.app import app

runner = CliRunner()

ONE_DAY = 24 * 60 * 60 * 1000

# ---------------------------------------------------------------------------
# Helpers -- reusable fixtures / factories
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in (
        "FEATUREGATE_EDITION_CODE",
        "FEATUREGATE_MODE",
        "FEATUREGATE_LICENSE_PATH",
        "FEATUREGATE_ENTITLEMENTS_PATH",
        "FEATUREGATE_REGISTRY_PATH",
        "FEATUREGATE_STRUCTURED_LOGGING",
        "FEATUREGATE_DEBUG",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


def _write(path: Path, data: object) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


def _json_stdout(result) -> dict:
    # Rich output goes to stderr; only the JSON document is on stdout.
    return json.loads(result.stdout)


# ---------------------------------------------------------------------------
# features
# ---------------------------------------------------------------------------


class TestFeaturesCommand:
    def test_lists_builtin_features(self) -> None:
        result = runner.invoke(app, ["features"])
        assert result.exit_code == 0

    def test_json_output(self) -> None:
        result = runner.invoke(app, ["--json", "features"])
        assert result.exit_code == 0
        data = _json_stdout(result)
        assert sorted(data) == ["neon", "prometheus"]
        assert data["neon"]["entitlements"]["NeonDatabaseIntegration"] == "required"

    def test_missing_registry_file(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["features", "--registry", str(tmp_path / "missing.yaml")])
        assert result.exit_code == 3


# ---------------------------------------------------------------------------
# snapshot
# ---------------------------------------------------------------------------


class TestSnapshotCommand:
    def test_default_snapshot(self) -> None:
        result = runner.invoke(app, ["--json", "snapshot"])
        assert result.exit_code == 0
        assert _json_stdout(result) == {
            "plan": "ce",
            "entitlements": {"NeonDatabaseIntegration": False, "DatadogIntegration": False},
            "license": {"status": "none"},
            "mode": "server",
        }

    def test_env_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FEATUREGATE_EDITION_CODE", "pro")
        monkeypatch.setenv("FEATUREGATE_MODE", "cli")
        result = runner.invoke(app, ["--json", "snapshot"])
        assert result.exit_code == 0
        data = _json_stdout(result)
        assert data["plan"] == "selfHostedCloud"
        assert data["mode"] == "cli"

    def test_grace_period_license(self, tmp_path: Path) -> None:
        now = _now_ms()
        license_path = _write(
            tmp_path / "license.json",
            {"type": "trial", "state": "expired", "expiry_at": now - ONE_DAY, "grace_at": now + ONE_DAY},
        )
        result = runner.invoke(
            app, ["--json", "snapshot", "--edition", "pro-lite", "--license", str(license_path)]
        )
        assert result.exit_code == 0
        assert _json_stdout(result)["license"]["status"] == "gracePeriod"

    def test_human_output(self) -> None:
        result = runner.invoke(app, ["snapshot", "--edition", "cloud"])
        assert result.exit_code == 0

    def test_unknown_edition(self) -> None:
        result = runner.invoke(app, ["snapshot", "--edition", "enterprise-max"])
        assert result.exit_code == 3

    def test_invalid_mode_in_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FEATUREGATE_MODE", "daemon")
        result = runner.invoke(app, ["snapshot"])
        assert result.exit_code == 3
        assert not isinstance(result.exception, ValidationError)


# ---------------------------------------------------------------------------
# check
# ---------------------------------------------------------------------------


class TestCheckCommand:
    def test_neon_disabled_without_entitlement(self) -> None:
        result = runner.invoke(app, ["--json", "check", "neon", "--edition", "cloud"])
        assert result.exit_code == 1
        data = _json_stdout(result)
        assert data["feature"] == "neon"
        assert data["status"] == "disabled"
        assert "cloud" in data["reasons"]["matched"]
        assert "entitlements.NeonDatabaseIntegration" in data["reasons"]["unmatched"]

    def test_neon_enabled_with_entitlement(self, tmp_path: Path) -> None:
        ents = _write(tmp_path / "ents.json", {"NeonDatabaseIntegration": True, "DatadogIntegration": False})
        result = runner.invoke(
            app, ["--json", "check", "neon", "--edition", "cloud", "--entitlements", str(ents)]
        )
        assert result.exit_code == 0
        assert _json_stdout(result)["status"] == "enabled"

    def test_prometheus_with_active_license(self, tmp_path: Path) -> None:
        lic = _write(tmp_path / "license.json", {"type": "trial", "state": "active", "expiry_at": _now_ms() + ONE_DAY})
        result = runner.invoke(app, ["check", "prometheus", "--edition", "pro-lite", "--license", str(lic)])
        assert result.exit_code == 0

    def test_prometheus_license_outside_ee_lite(self, tmp_path: Path) -> None:
        lic = _write(tmp_path / "license.json", {"type": "trial", "state": "active", "expiry_at": _now_ms() + ONE_DAY})
        result = runner.invoke(
            app, ["--json", "check", "prometheus", "--edition", "cloud", "--license", str(lic)]
        )
        assert result.exit_code == 1
        data = _json_stdout(result)
        assert "eeLiteLicense" in data["reasons"]["matched"]
        assert "eeLite" in data["reasons"]["unmatched"]

    def test_custom_registry_and_mode(self, tmp_path: Path) -> None:
        registry = _write(
            tmp_path / "features.json",
            {
                "local-console": {
                    "ce": "enabled",
                    "eeLite": "disabled",
                    "eeLiteLicense": "notRequired",
                    "cloud": "disabled",
                    "selfHostedCloud": "disabled",
                    "entitlements": {"NeonDatabaseIntegration": "notRequired", "DatadogIntegration": "notRequired"},
                    "cliMode": "cliOnly",
                }
            },
        )
        args = ["check", "local-console", "--edition", "oss", "--registry", str(registry)]
        assert runner.invoke(app, [*args, "--mode", "cli"]).exit_code == 0
        assert runner.invoke(app, [*args, "--mode", "server"]).exit_code == 1

    def test_unknown_feature(self) -> None:
        result = runner.invoke(app, ["check", "time-travel"])
        assert result.exit_code == 3

    def test_malformed_license(self, tmp_path: Path) -> None:
        lic = _write(tmp_path / "license.json", {"type": "trial", "state": "active"})
        result = runner.invoke(app, ["check", "prometheus", "--edition", "pro-lite", "--license", str(lic)])
        assert result.exit_code == 3

    def test_invalid_registry(self, tmp_path: Path) -> None:
        registry = _write(tmp_path / "features.json", {"broken": {"ce": "enabled"}})
        result = runner.invoke(app, ["check", "broken", "--registry", str(registry)])
        assert result.exit_code == 3
