"""Google Cloud project and region handling through the gcloud CLI."""

import logging
import secrets
import string
from pathlib import Path
from typing import Mapping, Optional, Sequence

from rich.text import Text

from .commands import CommandRunner, join_command, output_lines
from .errors import CommandError
from .prompts import Prompter
from .selection import CatalogEntry, CatalogSelector, resolve_field

logger = logging.getLogger(__name__)

PROJECT_KEY = "GOOGLE_PROJECT_NAME"
REGION_KEY = "GOOGLE_PROJECT_REGION"
PROJECT_ID_PREFIX = "sipgateio-"
PROJECT_ID_LENGTH = 30
PROJECT_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_project_id() -> str:
    suffix_length = PROJECT_ID_LENGTH - len(PROJECT_ID_PREFIX)
    return PROJECT_ID_PREFIX + "".join(secrets.choice(PROJECT_ID_ALPHABET) for _ in range(suffix_length))


class GoogleCloud:
    def __init__(self, runner: CommandRunner, selector: CatalogSelector, prompter: Prompter):
        self.runner = runner
        self.selector = selector
        self.prompter = prompter
        self.theme = prompter.theme

    def list_projects(self) -> list[str]:
        self.theme.info("Fetching Google Cloud projects...")
        return output_lines(self.runner.run('gcloud projects list --format="value(projectId)"'))

    def list_regions(self) -> list[str]:
        self.theme.info("Fetching Google Cloud regions...")
        return output_lines(self.runner.run('gcloud app regions list --format="value(region)"'))

    def ensure_authenticated(self):
        accounts = output_lines(
            self.runner.run('gcloud auth list --filter=status:ACTIVE --format="value(account)"')
        )
        if accounts:
            logger.debug("Active gcloud account: %s", accounts[0])
            return
        self.theme.info("No active gcloud account, starting login...")
        self.runner.run("gcloud auth login", capture=False)

    def create_project(self, name: str) -> Optional[str]:
        """Create a project named `name`; return its generated ID, or None on failure."""
        project_id = generate_project_id()
        self.theme.info(f"Creating new GCP project with the name: {name} and the project ID: {project_id}...")
        try:
            self.runner.run(join_command("gcloud", "projects", "create", project_id, f"--name={name}"))
        except CommandError as e:
            logger.debug("Project creation failed: %s %s", e, e.stderr)
            self.theme.fail(
                "Could not create GCP project. Please check if the project ID is (globally) unique and valid."
            )
            return None
        return project_id

    def set_project(self, name: str) -> str:
        self.runner.run(join_command("gcloud", "config", "set", "project", name))
        self.theme.warn(f"Important: Check if Cloud Build API is enabled for {name}")
        return name

    def _choose_project(self, projects: Sequence[str]) -> str:
        entries = [CatalogEntry(project) for project in projects]
        while True:
            selection = self.selector.select(
                entries,
                "Choose a GCP project for this example or enter a new name to generate one:",
                allow_new=True,
            )
            if selection.found:
                return selection.key
            project_id = self.create_project(selection.key)
            if project_id is not None:
                return project_id
            if not self.prompter.confirm("Do you want to try another project name?"):
                raise CommandError(
                    join_command("gcloud", "projects", "create", f"--name={selection.key}"),
                    stderr="Failed to create a new GCP project.",
                )

    def select_project(self, config: Mapping[str, str]) -> str:
        projects = self.list_projects()
        name = resolve_field(config, PROJECT_KEY, projects, self._choose_project, self.theme, path_like=True)
        return self.set_project(name)

    def select_region(self, config: Mapping[str, str]) -> str:
        regions = self.list_regions()
        return resolve_field(
            config,
            REGION_KEY,
            regions,
            lambda values: self.selector.choose_value(values, "Choose a region for your GCP App Engine application:"),
            self.theme,
        )

    def deploy(self, directory: Path, region: str):
        try:
            self.runner.run(join_command("gcloud", "app", "create", f"--region={region}"), cwd=directory)
        except CommandError as e:
            logger.debug("gcloud app create failed: %s", e.stderr)
            self.theme.warn("Could not create App Engine application, it may already exist.")
        self.theme.console.print(Text("Deploying to App Engine...", style=self.theme.accent))
        self.runner.run("gcloud app deploy --quiet", cwd=directory, capture=False)
