"""Choosing which example (remote or local) to configure and deploy."""

from pathlib import Path
from typing import Mapping, Sequence

from .catalog import ProjectDescriptor, with_tab_offsets
from .prompts import Prompter
from .selection import CatalogSelector, resolve_field

EXAMPLE_KEY = "EXAMPLE_REPO_NAME"
APP_CONFIG_FILENAME = "app.yaml"


def select_example(
    config: Mapping[str, str],
    projects: Sequence[ProjectDescriptor],
    selector: CatalogSelector,
) -> str:
    projects = with_tab_offsets(projects)
    names = [project.repository for project in projects]

    def choose(_names: Sequence[str]) -> str:
        entries = [project.as_entry() for project in projects]
        return selector.select(
            entries,
            "Choose a sipgate.io example:",
            tab_offsets=[project.tab_offset for project in projects],
        ).key

    return resolve_field(config, EXAMPLE_KEY, names, choose, selector.theme)


def select_local_project(prompter: Prompter) -> Path:
    """Ask until the user names an existing directory containing app.yaml."""
    while True:
        answer = prompter.ask("Please choose the path to your local repository:")
        cleaned = answer.strip().rstrip("/") or answer.strip()
        path = Path(cleaned).expanduser()
        if not cleaned or not path.exists():
            prompter.theme.warn("Please choose an existing Path.")
            continue
        if not (path / APP_CONFIG_FILENAME).exists():
            prompter.theme.info(
                f"Invalid Repository. Please select a path which contains an {APP_CONFIG_FILENAME} config file."
            )
            continue
        return path
