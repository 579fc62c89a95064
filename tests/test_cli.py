"""CLI commands with the relay client mocked out."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from click.testing import CliRunner

from conftest import make_message
from getpushover.cli.main import main
from getpushover.errors import AuthError
from getpushover.store import CredentialStore, DedupLedger


@pytest.fixture
def paths(tmp_path):
    return tmp_path / "config.json", tmp_path / "pushover.db"


@pytest.fixture
def fake_relay():
    relay = MagicMock()
    relay.__aenter__ = AsyncMock(return_value=relay)
    relay.__aexit__ = AsyncMock(return_value=False)
    relay.login = AsyncMock(return_value="sec-1")
    relay.register_device = AsyncMock(return_value="dev-1")
    relay.fetch_messages = AsyncMock(return_value=[])
    relay.acknowledge = AsyncMock(return_value=True)
    with patch("getpushover.cli.main.RelayClient", MagicMock(return_value=relay)):
        yield relay


def _invoke(paths, *args, input=None):
    config, db = paths
    return CliRunner().invoke(main, ["--config", str(config), "--db", str(db), *args], input=input)


def _register(paths):
    store = CredentialStore(paths[0])
    store.set("email", "me@example.com")
    store.set("device_name", "laptop")
    store.set("secret", "sec-1")
    store.set("device_id", "dev-1")
    return store


class TestLogin:
    def test_login_saves_credentials(self, paths, fake_relay):
        result = _invoke(paths, "login", "--email", "me@example.com", "--device-name", "laptop", input="hunter2\n")

        assert result.exit_code == 0, result.output
        fake_relay.login.assert_awaited_once_with("me@example.com", "hunter2")
        fake_relay.register_device.assert_awaited_once_with("sec-1", "laptop", current_device_id=None)
        creds = CredentialStore(paths[0]).credentials()
        assert creds.secret == "sec-1"
        assert creds.device_id == "dev-1"
        assert creds.device_name == "laptop"
        assert creds.email == "me@example.com"

    def test_login_prompts_for_twofa(self, paths, fake_relay):
        fake_relay.login.side_effect = [AuthError("code needed", code="twofa_required"), "sec-2"]

        result = _invoke(paths, "login", "--email", "me@example.com", "--device-name", "laptop",
                         input="hunter2\n123456\n")

        assert result.exit_code == 0, result.output
        assert fake_relay.login.await_args_list[-1].kwargs == {"twofa": "123456"}
        assert CredentialStore(paths[0]).get("secret") == "sec-2"

    def test_login_failure_exits(self, paths, fake_relay):
        fake_relay.login.side_effect = AuthError("Login failed: HTTP 400")

        result = _invoke(paths, "login", "--email", "me@example.com", "--device-name", "laptop", input="bad\n")

        assert result.exit_code == 1
        assert not CredentialStore(paths[0]).has("secret")

    def test_login_with_taken_name_and_no_device(self, paths, fake_relay):
        fake_relay.register_device.return_value = None

        result = _invoke(paths, "login", "--email", "me@example.com", "--device-name", "laptop", input="hunter2\n")

        assert result.exit_code == 1
        assert "already registered" in result.output


class TestStatusAndReset:
    def test_status_without_device(self, paths):
        result = _invoke(paths, "status")

        assert result.exit_code == 0
        assert "No device registered" in result.output

    def test_status_with_device(self, paths):
        _register(paths)

        result = _invoke(paths, "status")

        assert result.exit_code == 0
        assert "dev-1" in result.output

    def test_reset_confirmed(self, paths):
        store = _register(paths)

        result = _invoke(paths, "reset", input="y\n")

        assert result.exit_code == 0
        assert not store.has("secret")

    def test_reset_declined(self, paths):
        store = _register(paths)

        result = _invoke(paths, "reset", input="n\n")

        assert result.exit_code == 0
        assert store.get("secret") == "sec-1"


class TestSyncAndPending:
    def test_commands_require_device(self, paths):
        for command in ("sync", "pending", "run"):
            result = _invoke(paths, command)
            assert result.exit_code == 1

    def test_sync_once(self, paths, fake_relay):
        _register(paths)
        fake_relay.fetch_messages.return_value = [make_message(5), make_message(6)]

        result = _invoke(paths, "sync", "--console")

        assert result.exit_code == 0, result.output
        assert "2 fetched, 2 delivered" in result.output
        fake_relay.acknowledge.assert_awaited_once_with("sec-1", "dev-1", 6)
        ledger = DedupLedger(paths[1])
        try:
            assert ledger.count() == 2
        finally:
            ledger.close()

    def test_pending_json(self, paths, fake_relay):
        _register(paths)
        fake_relay.fetch_messages.return_value = [make_message(5, title="Backup")]

        result = _invoke(paths, "pending", "--json")

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data[0]["id"] == 5
        assert data[0]["title"] == "Backup"
        fake_relay.acknowledge.assert_not_awaited()
