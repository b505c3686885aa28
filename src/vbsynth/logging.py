"""Command logging for vbsynth."""

import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

# Log file location (outside .vbsynth/ so it survives re-initialization)
VBSYNTH_LOGS_DIR = ".vbsynth-logs"
COMMAND_LOG_FILE = "commands.log"
MAX_LOG_SIZE_MB = 10

# Commands that are two words (group + subcommand)
COMMAND_GROUPS = {"config", "generate", "logs", "symbols"}


def get_logs_path(base_path: Optional[Path] = None) -> Path:
    """Get the .vbsynth-logs directory path.

    Args:
        base_path: Base path for logs. Defaults to cwd.

    Returns:
        Path to .vbsynth-logs directory.
    """
    if base_path is None:
        base_path = Path.cwd()
    return base_path / VBSYNTH_LOGS_DIR


def is_logging_enabled(base_path: Optional[Path] = None) -> bool:
    """Check if command logging is enabled via config.

    Args:
        base_path: Base path. Defaults to cwd.

    Returns:
        False only if an initialized config turns logging off.
    """
    from .config import get_vbsynth_path, CONFIG_FILE
    from .storage import read_json

    config_file = get_vbsynth_path(base_path) / CONFIG_FILE
    if not config_file.exists():
        return True

    try:
        config = read_json(config_file)
    except (OSError, ValueError):
        return True
    return config.get("command_logging", True)


def log_command(command: str, args: list[str], base_path: Optional[Path] = None) -> None:
    """Log a command invocation.

    Args:
        command: The command name (e.g., "generate udt").
        args: Command arguments.
        base_path: Base path. Defaults to cwd.
    """
    if not is_logging_enabled(base_path):
        return

    logs_path = get_logs_path(base_path)
    log_file = logs_path / COMMAND_LOG_FILE

    logs_path.mkdir(parents=True, exist_ok=True)

    # Size-based rotation, keep one backup
    if log_file.exists():
        size_mb = log_file.stat().st_size / (1024 * 1024)
        if size_mb > MAX_LOG_SIZE_MB:
            backup = logs_path / f"{COMMAND_LOG_FILE}.1"
            if backup.exists():
                backup.unlink()
            log_file.rename(backup)

    timestamp = datetime.now().isoformat()
    args_str = " ".join(f'"{a}"' if " " in a else a for a in args)
    entry = f"{timestamp} | {command} | {args_str}\n"

    with log_file.open("a", encoding="utf-8") as f:
        f.write(entry)


def split_command(argv: list[str]) -> tuple[str, list[str]]:
    """Split CLI arguments into the command name and its arguments.

    Args:
        argv: Arguments after the program name.

    Returns:
        (command, remaining args). Group commands such as "generate udt"
        are returned as two words.
    """
    if not argv or argv[0].startswith("-"):
        return "unknown", list(argv)

    command_parts = [argv[0]]
    rest = argv[1:]
    if argv[0] in COMMAND_GROUPS and rest and not rest[0].startswith("-"):
        command_parts.append(rest[0])
        rest = rest[1:]
    return " ".join(command_parts), list(rest)


def log_from_cli() -> None:
    """Log the current CLI invocation.

    Call this from the CLI callback to capture all vbsynth commands.
    """
    if len(sys.argv) < 2:
        return

    command, args = split_command(sys.argv[1:])
    log_command(command, args)


def parse_log_file(base_path: Optional[Path] = None) -> list[dict]:
    """Parse the command log file into structured entries.

    Args:
        base_path: Base path. Defaults to cwd.

    Returns:
        List of log entries as dicts with keys: timestamp, command, args.
    """
    log_file = get_logs_path(base_path) / COMMAND_LOG_FILE

    if not log_file.exists():
        return []

    entries = []
    with log_file.open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue

            parts = line.split(" | ", 2)
            if len(parts) >= 2:
                entries.append({
                    "timestamp": parts[0],
                    "command": parts[1],
                    "args": parts[2] if len(parts) > 2 else "",
                })

    return entries
