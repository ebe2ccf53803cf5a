import argparse
import json
import logging
import os
import sys
from pathlib import Path

logger = logging.getLogger("ArrangementMCP")

CONFIG_FILE_NAME = "claude_desktop_config.json"
SERVER_NAME = "ArrangementMCP"

# settings worth pinning in the client config when they differ from the defaults
_FORWARDED_ENV = ("ARRANGEMENT_MCP_HOST", "ARRANGEMENT_MCP_PORT", "ARRANGEMENT_MCP_HOLDING_AREA")


def get_claude_config_path() -> Path | None:
    """Directory holding the desktop client's config on this platform.

    The directory may not exist yet; ``write_config`` creates it.
    """
    home = Path.home()
    if sys.platform == "win32":
        return home / "AppData" / "Roaming" / "Claude"
    if sys.platform == "darwin":
        return home / "Library" / "Application Support" / "Claude"
    if sys.platform.startswith("linux"):
        return Path(os.environ.get("XDG_CONFIG_HOME", home / ".config")) / "Claude"
    return None


def generate_config() -> dict:
    entry = {"command": sys.executable, "args": ["-m", "ArrangementMCP_Server"]}
    env = {key: os.environ[key] for key in _FORWARDED_ENV if key in os.environ}
    if env:
        entry["env"] = env
    return {"mcpServers": {SERVER_NAME: entry}}


def _read_existing(config_file: Path) -> dict:
    if not config_file.exists():
        return {}
    try:
        return json.loads(config_file.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        logger.warning("Could not read %s (%s), starting fresh", config_file, exc)
        return {}


def write_config(config: dict, claude_path: Path) -> Path:
    """Merge ``config`` into the client config file under ``claude_path``.

    ``claude_path`` may be the directory or the json file itself. Other
    servers already listed in the file are kept.
    """
    folder = claude_path.parent if claude_path.suffix == ".json" else claude_path
    folder.mkdir(parents=True, exist_ok=True)
    config_file = folder / CONFIG_FILE_NAME

    merged = _read_existing(config_file)
    merged.setdefault("mcpServers", {}).update(config["mcpServers"])
    config_file.write_text(json.dumps(merged, indent=2), encoding="utf-8")
    return config_file


def cli(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="arrangement-mcp",
        description="Run the ArrangementMCP server or register it with an MCP client.",
    )
    parser.add_argument("--print-config", action="store_true",
                        help="Print the client config entry and exit")
    parser.add_argument("--install-config", action="store_true",
                        help=f"Add this server to {CONFIG_FILE_NAME} and exit")
    parser.add_argument("--config-path", type=Path,
                        help=f"Directory containing {CONFIG_FILE_NAME}")
    args = parser.parse_args(argv)

    if args.print_config:
        print(json.dumps(generate_config(), indent=2))
        return 0

    if args.install_config:
        claude_path = args.config_path or get_claude_config_path()
        if claude_path is None:
            print("Could not locate the client config directory on this platform; "
                  "pass it with --config-path.")
            return 1
        print("Writing config to", write_config(generate_config(), claude_path))
        return 0

    from ArrangementMCP_Server.server import main
    main()
    return 0


if __name__ == "__main__":
    sys.exit(cli())
