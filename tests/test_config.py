from __future__ import annotations

import json
from pathlib import Path

from ArrangementMCP_Server.__main__ import cli, generate_config, write_config
from ArrangementMCP_Server.config import Settings


def test_defaults(monkeypatch) -> None:
    for key in ("HOST", "PORT", "HOLDING_AREA", "MAX_SLICES", "LOG_LEVEL"):
        monkeypatch.delenv(f"ARRANGEMENT_MCP_{key}", raising=False)
    settings = Settings.from_env()
    assert settings.port == 9877
    assert settings.holding_area_start == 40000.0
    assert settings.max_slices == 64


def test_environment_overrides(monkeypatch) -> None:
    monkeypatch.setenv("ARRANGEMENT_MCP_PORT", "9999")
    monkeypatch.setenv("ARRANGEMENT_MCP_HOLDING_AREA", "2000")
    monkeypatch.setenv("ARRANGEMENT_MCP_LOG_LEVEL", "debug")
    settings = Settings.from_env()
    assert settings.port == 9999
    assert settings.holding_area_start == 2000.0
    assert settings.log_level == "DEBUG"


def test_generate_config_carries_connection_env(monkeypatch) -> None:
    monkeypatch.setenv("ARRANGEMENT_MCP_PORT", "9999")
    monkeypatch.delenv("ARRANGEMENT_MCP_HOST", raising=False)
    monkeypatch.delenv("ARRANGEMENT_MCP_HOLDING_AREA", raising=False)
    server = generate_config()["mcpServers"]["ArrangementMCP"]
    assert server["args"] == ["-m", "ArrangementMCP_Server"]
    assert server["env"] == {"ARRANGEMENT_MCP_PORT": "9999"}


def test_write_config_merges_existing_servers(tmp_path: Path) -> None:
    config_file = tmp_path / "claude_desktop_config.json"
    config_file.write_text(json.dumps({"mcpServers": {"Other": {"command": "other"}}}))

    written = write_config({"mcpServers": {"ArrangementMCP": {"command": "python"}}}, tmp_path)

    assert written == config_file
    servers = json.loads(config_file.read_text())["mcpServers"]
    assert set(servers) == {"Other", "ArrangementMCP"}


def test_cli_print_config(capsys) -> None:
    assert cli(["--print-config"]) == 0
    assert "ArrangementMCP" in json.loads(capsys.readouterr().out)["mcpServers"]
