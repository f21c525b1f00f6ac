#!/usr/bin/env python3
"""
sipgate.io CLI - Configure and deploy sipgate.io example projects

Usage:
    sipgateio                       # interactive configuration wizard
    sipgateio configure             # same as above
    sipgateio deploy [--config config.cfg] [--local]
    sipgateio check
"""

import logging
import shutil
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import typer
from rich.align import Align
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.text import Text
from typer.core import TyperGroup

from .catalog import CatalogClient, default_client
from .commands import CommandRunner, join_command
from .config import DEFAULT_CONFIG_PATH, Config, config_exists, load_config, save_config
from .errors import CatalogFetchError, CommandError, SipgateioCliError
from .gcloud import PROJECT_KEY, REGION_KEY, GoogleCloud
from .projects import EXAMPLE_KEY, select_example, select_local_project
from .prompts import ConsolePrompter, PromptTheme
from .selection import CatalogSelector
from .template import Question, parse_template
from .tracker import StepTracker
from .wizard import ConfirmationWizard

logger = logging.getLogger(__name__)

BANNER = r"""
      _                     _         _
 ___ (_) _ __   __ _  __ _ | |_  ___ (_) ___
/ __|| || '_ \ / _` |/ _` || __|/ _ \| |/ _ \
\__ \| || |_) | (_| | (_| || |_|  __/| | (_) |
|___/|_|| .__/ \__, |\__,_| \__|\___||_|\___/
        |_|    |___/
"""

TAGLINE = "Configure and deploy sipgate.io examples"

# Questions every configuration starts with; the example's own
# .env.example questions follow.
DEPLOY_TEMPLATE = f"""
# Name of the sipgate.io example repository
{EXAMPLE_KEY}=
# Google Cloud project the example is deployed to
{PROJECT_KEY}=
# App Engine region, for example europe-west3
{REGION_KEY}=
"""

REQUIRED_TOOLS = {
    "gcloud": ("Google Cloud CLI", "https://cloud.google.com/sdk/docs/install"),
    "git": ("Git version control", "https://git-scm.com/downloads"),
}


@dataclass
class CliState:
    theme: PromptTheme = field(default_factory=PromptTheme)
    skip_tls: bool = False

    @property
    def console(self) -> Console:
        return self.theme.console


class BannerGroup(TyperGroup):
    """Custom group that shows banner before help."""

    def format_help(self, ctx, formatter):
        show_banner(Console())
        super().format_help(ctx, formatter)


app = typer.Typer(
    name="sipgateio",
    help="Configure and deploy sipgate.io example projects",
    add_completion=False,
    invoke_without_command=True,
    cls=BannerGroup,
)


def show_banner(console: Console):
    """Display the ASCII art banner."""
    banner_lines = BANNER.strip("\n").split("\n")
    colors = ["bright_blue", "blue", "cyan", "bright_cyan", "white", "bright_white"]

    styled_banner = Text()
    for i, line in enumerate(banner_lines):
        styled_banner.append(line + "\n", style=colors[i % len(colors)])

    console.print(Align.center(styled_banner))
    console.print(Align.center(Text(TAGLINE, style="italic bright_yellow")))
    console.print()


def setup_logging(debug: bool):
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def fail(console: Console, title: str, error: Exception):
    console.print()
    console.print(Panel(str(error), title=f"[red]{title}[/red]", border_style="red", padding=(1, 2)))
    raise typer.Exit(1)


def make_catalog(state: CliState) -> CatalogClient:
    return CatalogClient(default_client(verify=not state.skip_tls))


def make_runner() -> CommandRunner:
    return CommandRunner()


def merge_questions(*groups: list[Question]) -> list[Question]:
    """Concatenate question lists, keeping the first question for each name."""
    seen = set()
    merged = []
    for group in groups:
        for question in group:
            if question.name not in seen:
                seen.add(question.name)
                merged.append(question)
    return merged


def run_configuration_wizard(state: CliState, directory: Optional[Path] = None) -> Config:
    """Pick an example, fetch its template and ask for every value."""
    console = state.console
    selector = CatalogSelector(state.theme)
    prompter = ConsolePrompter(state.theme)

    console.print("[cyan]Fetching sipgate.io examples...[/cyan]")
    catalog = make_catalog(state)
    projects = catalog.fetch_catalog()
    example = select_example({}, projects, selector)
    console.print(f"[cyan]Selected example:[/cyan] {example}")

    template = catalog.fetch_template(example)
    deploy_questions = [
        Question(q.name, q.prompt_text, example if q.name == EXAMPLE_KEY else q.default_value, q.help_text)
        for q in parse_template(DEPLOY_TEMPLATE)
    ]
    questions = merge_questions(deploy_questions, parse_template(template))

    wizard = ConfirmationWizard(questions, prompter, directory=directory)
    config = wizard.run()
    console.print(f"[green]✓[/green] Configuration written to [cyan]{wizard.written_path}[/cyan]")
    return config


@app.callback()
def callback(
    ctx: typer.Context,
    debug: bool = typer.Option(False, "--debug", help="Show debug logging"),
    skip_tls: bool = typer.Option(False, "--skip-tls", help="Skip SSL/TLS verification (not recommended)"),
):
    """Run the configuration wizard when no subcommand is provided."""
    setup_logging(debug)
    state = CliState(skip_tls=skip_tls)
    ctx.obj = state
    if ctx.invoked_subcommand is None and "--help" not in sys.argv and "-h" not in sys.argv:
        show_banner(state.console)
        _configure(state)


def _configure(state: CliState) -> Config:
    try:
        return run_configuration_wizard(state)
    except CatalogFetchError as e:
        fail(state.console, "Catalog Fetch Error", e)
    except SipgateioCliError as e:
        fail(state.console, "Configuration Failed", e)


@app.command()
def configure(ctx: typer.Context):
    """Generate a configuration file for a sipgate.io example."""
    state: CliState = ctx.obj
    show_banner(state.console)
    _configure(state)


def write_env_file(directory: Path, config: Config) -> Path:
    """Write the example's own variables (everything but deploy keys) to .env."""
    deploy_keys = {EXAMPLE_KEY, PROJECT_KEY, REGION_KEY}
    return save_config(directory / ".env", {k: v for k, v in config.items() if k not in deploy_keys})


@app.command()
def deploy(
    ctx: typer.Context,
    config_path: Optional[Path] = typer.Option(None, "--config", help="Configuration file to use (default: ./config.cfg)"),
    local: bool = typer.Option(False, "--local", help="Deploy a local repository instead of cloning an example"),
):
    """
    Deploy a sipgate.io example to Google App Engine.

    This command will:
    1. Load the configuration file (or run the configuration wizard)
    2. Make sure you are logged in to gcloud
    3. Select the GCP project and App Engine region
    4. Clone the example (or use a local repository) and write its .env
    5. Run gcloud app deploy
    """
    state: CliState = ctx.obj
    console = state.console
    show_banner(console)

    missing = [tool for tool in REQUIRED_TOOLS if not shutil.which(tool)]
    if missing:
        names = ", ".join(missing)
        hints = "\n".join(f"Install {REQUIRED_TOOLS[t][0]}: [cyan]{REQUIRED_TOOLS[t][1]}[/cyan]" for t in missing)
        console.print(Panel(
            f"Required tool(s) not found: {names}\n{hints}",
            title="[red]Missing Tools[/red]",
            border_style="red",
        ))
        raise typer.Exit(1)

    runner = make_runner()
    prompter = ConsolePrompter(state.theme)
    selector = CatalogSelector(state.theme)
    cloud = GoogleCloud(runner, selector, prompter)

    try:
        if config_path is not None:
            config = load_config(config_path)
        elif config_exists(DEFAULT_CONFIG_PATH):
            config = load_config(DEFAULT_CONFIG_PATH)
        else:
            console.print("[yellow]No config.cfg found, starting the configuration wizard.[/yellow]")
            config = run_configuration_wizard(state)

        cloud.ensure_authenticated()
        cloud.select_project(config)
        region = cloud.select_region(config)

        if local:
            project_path = select_local_project(prompter)
            example = None
        else:
            catalog = make_catalog(state)
            example = select_example(config, catalog.fetch_catalog(), selector)
            project_path = Path.cwd() / example
    except SipgateioCliError as e:
        fail(console, "Deployment Setup Failed", e)

    tracker = StepTracker("Deploy sipgate.io example")
    for key, label in [
        ("clone", "Clone example repository"),
        ("env", "Write .env"),
        ("deploy", "Deploy to App Engine"),
    ]:
        tracker.add(key, label)

    try:
        if example is None:
            tracker.skip("clone", "local repository")
        elif project_path.exists():
            tracker.skip("clone", "existing checkout")
        else:
            tracker.start("clone")
            runner.run(join_command("git", "clone", catalog.clone_url(example), project_path))
            tracker.complete("clone", str(project_path))

        env_path = project_path / ".env"
        if env_path.exists() and not prompter.confirm(
            f"{env_path} already exists, are you sure you want to overwrite?", default=False
        ):
            tracker.skip("env", "kept existing .env")
        else:
            tracker.start("env")
            write_env_file(project_path, config)
            tracker.complete("env", str(env_path))

        tracker.start("deploy", region)
        cloud.deploy(project_path, region)
        tracker.complete("deploy", region)
    except CommandError as e:
        running = next((step.key for step in tracker.steps if step.status == "running"), "deploy")
        tracker.error(running, str(e))
        console.print(tracker.render())
        fail(console, "Deployment Failed", e)

    console.print(tracker.render())
    console.print("\n[bold green]Deployment finished.[/bold green]")


@app.command()
def check(ctx: typer.Context):
    """Check that all required tools are installed."""
    console: Console = ctx.obj.console
    show_banner(console)
    console.print("[bold]Checking for installed tools...[/bold]\n")

    tracker = StepTracker("Check Available Tools")
    all_ok = True
    for tool, (label, _) in REQUIRED_TOOLS.items():
        tracker.add(tool, label)
        if shutil.which(tool):
            tracker.complete(tool, "available")
        else:
            tracker.error(tool, "not found")
            all_ok = False

    console.print(tracker.render())

    if all_ok:
        console.print("\n[bold green]sipgate.io CLI is ready to use![/bold green]")
    else:
        for tool, (label, url) in REQUIRED_TOOLS.items():
            if not shutil.which(tool):
                console.print(f"[dim]Tip: Install {label} from {url}[/dim]")
        raise typer.Exit(1)


def main():
    app()


if __name__ == "__main__":
    main()
