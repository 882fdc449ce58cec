"""Logging for Third Brain: process diagnostics and the command log."""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

# Log file location (outside .thirdbrain/ so it survives re-initialization)
THIRDBRAIN_LOGS_DIR = ".thirdbrain-logs"
COMMAND_LOG_FILE = "commands.log"
MAX_LOG_SIZE_MB = 10

LOGGER_NAME = "thirdbrain"

# Commands whose first argument is a subcommand name
GROUP_COMMANDS = {"config", "logs"}


def configure_logging(verbose: bool = False) -> None:
    """Send thirdbrain log records to stderr.

    Args:
        verbose: If True, log at DEBUG with timestamps and logger names.
                 Otherwise log INFO and above with a terse format.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    # Replace any handler from a previous invocation in the same process
    for handler in list(logger.handlers):
        if getattr(handler, "_thirdbrain", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    if verbose:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
            datefmt="%H:%M:%S"
        ))
    else:
        handler.setFormatter(logging.Formatter("%(message)s"))
    handler._thirdbrain = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.propagate = False

    # Library chatter stays at WARNING unless debugging
    for name in ("openai", "httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.DEBUG if verbose else logging.WARNING)


def get_logs_path(base_path: Optional[Path] = None) -> Path:
    """Get the .thirdbrain-logs directory path.

    Args:
        base_path: Base path for logs. Defaults to cwd.

    Returns:
        Path to .thirdbrain-logs directory.
    """
    if base_path is None:
        base_path = Path.cwd()
    return base_path / THIRDBRAIN_LOGS_DIR


def is_logging_enabled(base_path: Optional[Path] = None) -> bool:
    """Check if command logging is enabled via config.

    Args:
        base_path: Base path. Defaults to cwd.

    Returns:
        True if logging is enabled, False otherwise.
    """
    from .config import get_thirdbrain_path, load_config

    if base_path is None:
        base_path = Path.cwd()

    thirdbrain_path = get_thirdbrain_path(base_path)
    if not thirdbrain_path.exists():
        return False

    return load_config(thirdbrain_path).command_logging


def log_command(command: str, args: list[str], base_path: Optional[Path] = None) -> None:
    """Log a command invocation.

    Args:
        command: The command name (e.g., "config set").
        args: Command arguments.
        base_path: Base path. Defaults to cwd.
    """
    if not is_logging_enabled(base_path):
        return

    logs_path = get_logs_path(base_path)
    log_file = logs_path / COMMAND_LOG_FILE

    # Create directory on first write
    logs_path.mkdir(parents=True, exist_ok=True)

    # Check log rotation (simple size-based)
    if log_file.exists():
        size_mb = log_file.stat().st_size / (1024 * 1024)
        if size_mb > MAX_LOG_SIZE_MB:
            # Rotate: keep .1 backup
            backup = logs_path / f"{COMMAND_LOG_FILE}.1"
            if backup.exists():
                backup.unlink()
            log_file.rename(backup)

    timestamp = datetime.now().isoformat()
    args_str = " ".join(f'"{a}"' if " " in a else a for a in args)
    entry = f"{timestamp} | {command} | {args_str}\n"

    with log_file.open("a") as f:
        f.write(entry)


def split_command_line(argv: list[str]) -> tuple[str, list[str]]:
    """Split CLI arguments into a command name and its remaining arguments.

    Group commands such as "config set" are recorded whole. Root options
    given before the command (e.g. --verbose) are dropped.
    """
    args = list(argv)
    while args and args[0].startswith("-"):
        args.pop(0)
    if not args:
        return "unknown", []

    command = args.pop(0)
    if command in GROUP_COMMANDS and args and not args[0].startswith("-"):
        command = f"{command} {args.pop(0)}"
    return command, args


def find_base_option(args: list[str]) -> Optional[Path]:
    """Return the value of a --base/-b option in the arguments, if given."""
    for i, arg in enumerate(args):
        if arg in ("--base", "-b") and i + 1 < len(args):
            return Path(args[i + 1])
        if arg.startswith("--base="):
            return Path(arg[len("--base="):])
    return None


def log_from_cli() -> None:
    """Log the current CLI invocation.

    Call this from the CLI callback to capture all thirdbrain commands.
    The entry goes to the log of the project named by --base, or the
    current directory.
    """
    if len(sys.argv) < 2:
        return

    command, remaining_args = split_command_line(sys.argv[1:])
    log_command(command, remaining_args, find_base_option(remaining_args))


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
    with log_file.open("r") as f:
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
