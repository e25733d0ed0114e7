"""First-time setup for the Perplexity OpenCode plugin.

Each step is independent: a failure is reported and the next step still runs.
Interactive mode asks before touching files the user owns.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from art import tprint
from rich.console import Console
from rich.prompt import Confirm, Prompt

import settings
from adapters import opencode_config
from adapters.opencode_config import StepResult

LOGGER = logging.getLogger(__name__)

NAME = "PERPLEXITY"
FONT = "tarty-1"
API_KEY_PREFIX = "pplx-"
API_KEY_URL = "https://www.perplexity.ai/settings/api"


@dataclass(frozen=True)
class InstallOptions:
    tui: bool = True
    api_key: Optional[str] = None
    config_dir: Optional[Path] = None


class Installer:
    """Runs the setup steps against one OpenCode config directory."""

    def __init__(
        self,
        options: InstallOptions,
        console: Optional[Console] = None,
        confirm: Optional[Callable[[str], bool]] = None,
        ask: Optional[Callable[[str], str]] = None,
    ) -> None:
        self._options = options
        self._console = console or Console()
        self._confirm = confirm or (lambda question: Confirm.ask(question, console=self._console))
        self._ask = ask or (lambda question: Prompt.ask(question, console=self._console, password=True))
        self.config_dir = options.config_dir or settings.get_config_dir()
        self.results: list[StepResult] = []

    def _step(self, title: str) -> None:
        self._console.print(f"\n[bold]{title}[/bold]")

    def _say(self, message: str) -> None:
        self._console.print(f"  {message}", highlight=False)

    def _run_step(self, action: Callable[[], StepResult]) -> StepResult:
        try:
            result = action()
        except (OSError, ValueError) as exc:
            LOGGER.exception("Installer step failed")
            result = StepResult(False, False, f"Failed: {exc}")
        self.results.append(result)
        if result.ok:
            self._say(result.message)
        else:
            self._console.print(f"  [red]{result.message}[/red]", highlight=False)
        return result

    def _allowed(self, question: str) -> bool:
        if not self._options.tui:
            return True
        if self._confirm(question):
            return True
        self._say("Skipped.")
        return False

    def resolve_api_key(self) -> str:
        self._step("Step 1: Configure API Key")
        api_key = self._options.api_key or os.environ.get(settings.ENV_API_KEY, "")

        if not api_key and self._options.tui:
            self._say(f"Get your API key from: {API_KEY_URL}")
            api_key = self._ask(f"Enter your Perplexity API key ({API_KEY_PREFIX}...)").strip()

        if not api_key:
            self._say(f"No API key provided. You can set {settings.ENV_API_KEY} environment variable later.")
            self._say(f"Get your API key at: {API_KEY_URL}")
        elif not api_key.startswith(API_KEY_PREFIX):
            self._say(f"[yellow]Warning:[/yellow] API key should start with '{API_KEY_PREFIX}'")
        else:
            self._say("API key configured")
        return api_key

    def write_plugin_settings(self, api_key: str) -> None:
        self._step("Step 2: Create Perplexity Config")
        if not api_key:
            self._say("Skipped (no API key)")
            return
        settings_path = settings.get_config_file_path(self.config_dir)
        self._run_step(lambda: opencode_config.create_plugin_settings(settings_path, api_key))

    def configure_host(self, api_key: str) -> None:
        self._step("Step 3: Configure OpenCode")
        config_path = opencode_config.find_host_config(self.config_dir)

        if config_path is None:
            if not api_key:
                self._say("No OpenCode config found. Skipped (no API key)")
                return
            if self._allowed("No OpenCode config found. Create one?"):
                self._run_step(lambda: opencode_config.create_host_config(self.config_dir, api_key))
            return

        if not self._allowed(f"Modify {config_path}?"):
            return
        self._run_step(lambda: opencode_config.add_plugin(config_path))
        if api_key:
            self._run_step(lambda: opencode_config.add_mcp_server(config_path, api_key))

    def add_instructions(self) -> None:
        self._step("Step 4: Add Perplexity Instructions to AGENTS.md")
        agents_path = self.config_dir / opencode_config.AGENTS_FILE
        if self._allowed(f"Add Perplexity usage instructions to {agents_path}?"):
            self._run_step(lambda: opencode_config.update_agents_md(self.config_dir))

    def print_mcp_instructions(self) -> None:
        self._step("Step 5: Install Perplexity MCP Server")
        for line in (
            "The plugin requires the perplexity-mcp server for actual web search.",
            "Installation options:",
            "",
            "1. Install globally (recommended):",
            "   uv tool install perplexity-mcp",
            "",
            "2. Add to your project:",
            "   uv add perplexity-mcp",
            "",
            "Prerequisite: uv must be installed",
            "   curl -LsSf https://astral.sh/uv/install.sh | sh",
            "   or: brew install uv",
            "",
            "For more installation methods, see:",
            "https://github.com/kevinmichaelchen/perplexity-mcp#installation",
        ):
            self._say(line)

    def print_summary(self, api_key: str) -> None:
        self._console.rule()
        self._console.print("\n[bold green]Setup Complete![/bold green]\n")
        if not api_key:
            self._console.print("Next steps:")
            self._console.print(f"1. Get your API key from: {API_KEY_URL}")
            self._console.print("2. Set the environment variable:")
            self._console.print(f'   export {settings.ENV_API_KEY}="{API_KEY_PREFIX}..."')
            self._console.print(f"   Or edit {settings.get_config_file_path(self.config_dir)}")
            self._console.print("3. Install the MCP server (see Step 5 above)")
        else:
            self._console.print("Perplexity plugin is configured!")
            self._console.print("IMPORTANT: The plugin requires the MCP server to function.")
            self._console.print("Install it using one of the commands shown in Step 5 above.")

        failed = [result for result in self.results if not result.ok]
        if failed:
            self._console.print(f"\n[yellow]{len(failed)} step(s) reported errors, see above.[/yellow]")

        self._console.print("\nKeyword triggers enabled:")
        self._console.print('  - "search the web...", "look up...", "find information..."')
        self._console.print('  - "what is the latest...", "recent news..."')
        self._console.print('  - "research...", "investigate..."')
        self._console.print('  - "compare...", "alternatives to..."')
        self._console.print("\nRestart OpenCode to activate the plugin.\n")

    def run(self) -> int:
        api_key = self.resolve_api_key()
        self.write_plugin_settings(api_key)
        self.configure_host(api_key)
        self.add_instructions()
        self.print_mcp_instructions()
        self.print_summary(api_key)
        return 0


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


def install(options: InstallOptions, console: Optional[Console] = None) -> int:
    """Run the installer. Returns the process exit code."""

    if options.tui:
        _print_banner()
    return Installer(options, console=console).run()
