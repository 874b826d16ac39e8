"""
Settings loading and the command line.
"""

import pytest
from typer.testing import CliRunner

from obs_remote.config import Settings
from obs_remote.main import app


def test_settings_defaults(monkeypatch):
    for var in ("OBS_HOST", "OBS_PORT", "OBS_PASSWORD", "OBS_DEBUG"):
        monkeypatch.delenv(var, raising=False)
    s = Settings()
    assert s.obs.host == "localhost"
    assert s.obs.port == 4444
    assert s.obs.password == ""
    assert s.obs.debug is False
    assert s.log_level == "info"


def test_settings_yaml_load(tmp_path):
    config = tmp_path / "config.yaml"
    config.write_text(
        "obs:\n  host: 192.168.1.100\n  port: 4455\n  password: secret\n  debug: true\n"
        "log_level: warning\n"
    )
    s = Settings.load(config)
    assert s.obs.host == "192.168.1.100"
    assert s.obs.port == 4455
    assert s.obs.password == "secret"
    assert s.obs.debug is True
    assert s.log_level == "warning"


def test_env_overrides_yaml(tmp_path, monkeypatch):
    config = tmp_path / "config.yaml"
    config.write_text("obs:\n  host: yaml.local\n  port: 4455\n")
    monkeypatch.setenv("OBS_HOST", "studio.local")
    s = Settings.load(config)
    assert s.obs.host == "studio.local"
    assert s.obs.port == 4455


def test_missing_yaml_uses_defaults(tmp_path):
    s = Settings.load(tmp_path / "nope.yaml")
    assert s.obs.port == 4444


def test_yaml_roundtrip(tmp_path):
    s = Settings.load(tmp_path / "nope.yaml")
    s.obs.host = "10.0.0.5"
    out = tmp_path / "out.yaml"
    s.to_yaml(out)
    assert Settings.load(out).obs.host == "10.0.0.5"


def test_cli_init_config(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(app, ["init-config", "--output", str(tmp_path / "generated.yaml")])
    assert result.exit_code == 0
    assert "port: 4444" in (tmp_path / "generated.yaml").read_text()


def test_cli_check_unreachable(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    import socket
    with socket.socket() as s:
        s.bind(("127.0.0.1", 0))
        port = s.getsockname()[1]
    result = CliRunner().invoke(app, ["check", "--host", "127.0.0.1", "--port", str(port)])
    assert result.exit_code == 1
    assert "Server not reachable" in result.output


@pytest.mark.parametrize("action", ["rewind"])
def test_cli_rejects_unknown_stream_action(action):
    result = CliRunner().invoke(app, ["stream", action])
    assert result.exit_code == 2


# ─── Session setup ────────────────────────────────────────────────────────────

from obs_remote import main
from obs_remote.core import OBSConnectionError
from tests.helpers import obs_responder


@pytest.mark.asyncio
async def test_handshake_error_is_not_reported_as_login(make_remote, monkeypatch, capsys):
    remote, transports = make_remote(obs_responder(GetVersion={"status": "error", "error": "nope"}))
    monkeypatch.setattr(main, "OBSRemote", lambda *args, **kwargs: remote)

    with pytest.raises(SystemExit) as exc_info:
        await main.open_session(Settings())

    out = capsys.readouterr().out
    assert exc_info.value.code == 1
    assert "Handshake failed: nope" in out
    assert "Login failed" not in out
    assert transports[0].closed


@pytest.mark.asyncio
async def test_socket_drop_during_login_closes_remote(make_remote, monkeypatch, capsys):
    server = obs_responder(auth_required=True)

    def responder(frame):
        if frame.get("request-type") == "Authenticate":
            raise OBSConnectionError("Connection isn't opened")
        return server(frame)

    remote, transports = make_remote(responder)
    monkeypatch.setattr(main, "OBSRemote", lambda *args, **kwargs: remote)
    settings = Settings()
    settings.obs.password = "secret"

    with pytest.raises(SystemExit) as exc_info:
        await main.open_session(settings)

    assert exc_info.value.code == 1
    assert "Login failed" in capsys.readouterr().out
    assert transports[0].closed
