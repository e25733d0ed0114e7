"""Command-line entry point for perplexity-nudge."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, TextIO

from dotenv import load_dotenv

import settings
from adapters import host_bridge
from core.config import PluginConfig
from core.hook import ChatMessageHook
from installer import InstallOptions, install

LOG_PREFIX = "[perplexity-opencode]"
COMMANDS = ("install", "hook", "help")

USAGE = """
perplexity-nudge - Perplexity AI web search plugin for OpenCode

Commands:
  install                Install and configure the plugin
    --no-tui             Non-interactive mode
    --api-key <key>      Provide API key directly
  hook                   Read one chat message as JSON on stdin and write the
                         (possibly extended) message parts to stdout

Examples:
  perplexity-nudge install
  perplexity-nudge install --no-tui --api-key pplx-xxx
"""


class _RedactingFormatter(logging.Formatter):
    def __init__(self, secrets: list[str], fmt: str, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._secrets: list[str] = []
        self.add_secrets(secrets)

    def add_secrets(self, secrets: list[str]) -> None:
        merged = set(self._secrets) | {secret for secret in secrets if secret}
        self._secrets = sorted(merged, key=len, reverse=True)

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


class _UsageError(Exception):
    pass


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        raise _UsageError(message)


def _configure_logging() -> _RedactingFormatter:
    """Send log records to stderr so stdout stays free for the hook bridge.

    Secrets are added to the returned formatter once the config is loaded.
    """

    load_dotenv()
    level = logging.DEBUG if settings.is_debug_enabled() else logging.WARNING
    fmt = f"%(asctime)s %(levelname)s {LOG_PREFIX} %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    formatter = _RedactingFormatter([], fmt=fmt, datefmt=datefmt)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    logging.basicConfig(level=level, handlers=[handler])
    return formatter


def _build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(prog="perplexity-nudge", add_help=False)
    parser.add_argument("command", nargs="?")
    parser.add_argument("-h", "--help", action="store_true", dest="show_help")
    parser.add_argument("--no-tui", action="store_true", help="Non-interactive mode")
    parser.add_argument("--api-key", help="Provide API key directly")
    return parser


def _print_help(stream: TextIO) -> None:
    print(USAGE, file=stream)


def _run_hook(config: PluginConfig) -> int:
    hook = ChatMessageHook(config)
    logging.getLogger(__name__).debug("Plugin initialized (configured=%s)", config.is_configured)
    if not config.is_configured:
        logging.getLogger(__name__).debug("Plugin disabled - %s not set", settings.ENV_API_KEY)
    return host_bridge.run(hook, sys.stdin, sys.stdout)


def main(argv: Optional[list[str]] = None) -> int:
    try:
        args, unknown = _build_parser().parse_known_args(argv)
    except _UsageError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        _print_help(sys.stderr)
        return 1

    if args.show_help or args.command in (None, "help"):
        _print_help(sys.stdout)
        return 0

    if args.command not in COMMANDS or unknown:
        bad = args.command if args.command not in COMMANDS else " ".join(unknown)
        print(f"Unknown command: {bad}", file=sys.stderr)
        _print_help(sys.stderr)
        return 1

    formatter = _configure_logging()
    formatter.add_secrets([args.api_key or ""])
    config = settings.load_config()
    formatter.add_secrets([config.api_key])

    if args.command == "install":
        return install(InstallOptions(tui=not args.no_tui, api_key=args.api_key))
    return _run_hook(config)


if __name__ == "__main__":
    sys.exit(main())
