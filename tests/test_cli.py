from __future__ import annotations

import asyncio
import json

import pytest
from typer.testing import CliRunner

from hkrestore.cli.app import app
from hkrestore.cli.commands import scan as scan_cmd
from hkrestore.config import (
    CONFIG_ENV_VAR,
    Settings,
    StorageConfig,
    VaultConfig,
    get_settings,
    write_settings,
)
from hkrestore.core import ResolvedEndpoint
from hkrestore.models import ServiceType

runner = CliRunner()


@pytest.fixture
def cli_env(tmp_path, monkeypatch):
    config_path = tmp_path / "config.toml"
    write_settings(
        Settings(
            storage=StorageConfig(path=str(tmp_path / "data")),
            vault=VaultConfig(backend="file"),
        ),
        config_path,
    )
    monkeypatch.setenv(CONFIG_ENV_VAR, str(config_path))
    # Wide enough that rich never wraps table cells.
    monkeypatch.setenv("COLUMNS", "200")
    get_settings.cache_clear()
    return tmp_path


def _stored_codes(data_dir):
    return json.loads((data_dir / "vault.json").read_text(encoding="utf-8"))


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert "hkrestore version" in result.output


def test_init_writes_config_and_data_dir(tmp_path, monkeypatch):
    config_path = tmp_path / "config.toml"
    monkeypatch.setenv(CONFIG_ENV_VAR, str(config_path))

    result = runner.invoke(
        app, ["init", "--data-dir", str(tmp_path / "data"), "--vault", "file"]
    )

    assert result.exit_code == 0, result.output
    assert config_path.exists()
    assert 'backend = "file"' in config_path.read_text()
    assert (tmp_path / "data" / "preferences.json").exists()
    assert (tmp_path / "data" / "Photos").is_dir()


def test_init_rejects_unknown_vault(tmp_path, monkeypatch):
    monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "config.toml"))
    result = runner.invoke(app, ["init", "--vault", "cloud"])
    assert result.exit_code == 1


def test_config_show(cli_env):
    result = runner.invoke(app, ["config", "show"])
    assert result.exit_code == 0
    assert "[vault]" in result.output
    assert "config.toml" in result.output


def test_codes_add_list_remove(cli_env):
    data_dir = cli_env / "data"

    result = runner.invoke(app, ["codes", "add", "Desk Lamp", "12345678", "-m", "Eve"])
    assert result.exit_code == 0, result.output
    assert "Saved code for 'Desk Lamp'" in result.output

    [stored] = _stored_codes(data_dir)
    assert stored["code"] == "123-45-678"
    assert stored["accessoryName"] == "Desk Lamp"

    result = runner.invoke(app, ["codes", "list"])
    assert result.exit_code == 0
    assert "123-45-678" in result.output

    result = runner.invoke(app, ["codes", "list", "--redact"])
    assert "123-**-***" in result.output

    result = runner.invoke(app, ["codes", "remove", stored["id"][:8]])
    assert result.exit_code == 0, result.output
    assert _stored_codes(data_dir) == []

    result = runner.invoke(app, ["codes", "list"])
    assert "No setup codes saved." in result.output


def test_codes_update(cli_env):
    runner.invoke(app, ["codes", "add", "Plug", "111-22-333"])
    [stored] = _stored_codes(cli_env / "data")

    result = runner.invoke(app, ["codes", "update", stored["id"], "--location", "Under the base"])

    assert result.exit_code == 0, result.output
    [updated] = _stored_codes(cli_env / "data")
    assert updated["id"] == stored["id"]
    assert updated["codeLocation"] == "Under the base"


def test_codes_update_rejects_empty_code(cli_env):
    runner.invoke(app, ["codes", "add", "Plug", "111-22-333"])
    [stored] = _stored_codes(cli_env / "data")

    result = runner.invoke(app, ["codes", "update", stored["id"], "--code", "abc"])

    assert result.exit_code == 1
    assert "Setup code is empty" in result.output
    [unchanged] = _stored_codes(cli_env / "data")
    assert unchanged["code"] == "111-22-333"


def test_codes_remove_unknown_id(cli_env):
    result = runner.invoke(app, ["codes", "remove", "ffffffff"])
    assert result.exit_code == 1
    assert "No record" in result.output


def test_codes_hints():
    result = runner.invoke(app, ["codes", "hints", "philips"])
    assert result.exit_code == 0
    assert "Philips Hue" in result.output

    result = runner.invoke(app, ["codes", "hints", "Acme"])
    assert "No hints" in result.output


def test_devices_add_and_list(cli_env):
    result = runner.invoke(
        app,
        ["devices", "add", "Porch Light", "-c", "lightbulb", "--room", "Porch", "--home", "Main"],
    )
    assert result.exit_code == 0, result.output
    assert "Added 'Porch Light'" in result.output

    result = runner.invoke(app, ["devices", "list", "--group-by", "room"])
    assert result.exit_code == 0
    assert "Porch Light" in result.output
    assert "Lightbulb" in result.output
    assert "1 accessory(ies), 1 reachable" in result.output


def test_devices_list_empty(cli_env):
    result = runner.invoke(app, ["devices", "list"])
    assert result.exit_code == 0
    assert "No accessories in the inventory." in result.output


def test_export_json(cli_env):
    runner.invoke(app, ["devices", "add", "Lamp"])
    runner.invoke(app, ["codes", "add", "Lamp", "12345678"])
    runner.invoke(app, ["codes", "add", "Garage", "87654321"])
    target = cli_env / "backup.json"

    result = runner.invoke(app, ["export", "json", "--output", str(target)])

    assert result.exit_code == 0, result.output
    data = json.loads(target.read_text(encoding="utf-8"))
    assert [item["name"] for item in data["accessories"]] == ["Lamp"]
    assert [code["accessoryName"] for code in data["codes"]] == ["Lamp", "Garage"]

    result = runner.invoke(app, ["export", "json", "--output", str(target)])
    assert result.exit_code == 1

    result = runner.invoke(app, ["export", "csv", "--output", str(target), "--force"])
    assert result.exit_code == 0
    assert target.read_text(encoding="utf-8").startswith("Name,Manufacturer")


class FakeZeroconfBackend:
    """Announces one HAP accessory shortly after browsing starts."""

    closed = False

    def __init__(self, resolve_timeout: float = 5.0) -> None:
        self.resolve_timeout = resolve_timeout

    def browse(self, service_type, on_found):
        if service_type is ServiceType.HAP:
            asyncio.get_running_loop().call_soon(on_found, "Eve Energy 55AA")
        return self

    def cancel(self) -> None:
        pass

    async def resolve(self, service_type, name):
        return ResolvedEndpoint(address="192.168.1.44", port=51826, properties={"md": "Energy"})

    async def close(self) -> None:
        FakeZeroconfBackend.closed = True


def test_scan_lists_and_adds_devices(cli_env, monkeypatch):
    monkeypatch.setattr(scan_cmd, "ZeroconfBackend", FakeZeroconfBackend)

    result = runner.invoke(
        app, ["scan", "--window", "0.1", "--redact", "--add", "--room", "Office"]
    )

    assert result.exit_code == 0, result.output
    assert "Eve Energy 55AA" in result.output
    assert "x.x.x.44" in result.output
    assert "Found 1 device(s)" in result.output
    assert "Added 1 device(s)" in result.output
    assert FakeZeroconfBackend.closed

    result = runner.invoke(app, ["devices", "list"])
    assert "Eve Energy 55AA" in result.output
    assert "HomeKit Device" in result.output


def test_scan_nothing_found(cli_env, monkeypatch):
    class QuietBackend(FakeZeroconfBackend):
        def browse(self, service_type, on_found):
            return self

    monkeypatch.setattr(scan_cmd, "ZeroconfBackend", QuietBackend)

    result = runner.invoke(app, ["scan", "--window", "0.05"])

    assert result.exit_code == 0, result.output
    assert "No HomeKit or Matter devices found." in result.output


def test_scan_rejects_bad_window(cli_env):
    result = runner.invoke(app, ["scan", "--window", "0"])
    assert result.exit_code == 1
