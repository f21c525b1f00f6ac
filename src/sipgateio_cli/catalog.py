"""Remote catalog of sipgate.io example repositories on GitHub."""

import logging
import os
import ssl
from dataclasses import dataclass, replace
from typing import Optional, Sequence

import httpx
import truststore

from .columns import calculate_tabs
from .errors import CatalogFetchError
from .selection import CatalogEntry

logger = logging.getLogger(__name__)

DEFAULT_ORG = "sipgate-io"
REPO_PREFIX = "sipgateio-"
TEMPLATE_FILENAME = ".env.example"
GITHUB_API = "https://api.github.com"
GITHUB_RAW = "https://raw.githubusercontent.com"
PER_PAGE = 100


@dataclass(frozen=True)
class ProjectDescriptor:
    repository: str
    description: str = ""
    tab_offset: int = 1

    def as_entry(self) -> CatalogEntry:
        return CatalogEntry(self.repository, self.description)


def with_tab_offsets(projects: Sequence[ProjectDescriptor]) -> list[ProjectDescriptor]:
    """Recompute tab offsets for the given list of projects."""
    tabs = calculate_tabs([project.repository for project in projects])
    return [replace(project, tab_offset=tab) for project, tab in zip(projects, tabs)]


def default_client(verify: bool = True) -> httpx.Client:
    ssl_context = truststore.SSLContext(ssl.PROTOCOL_TLS_CLIENT) if verify else False
    return httpx.Client(verify=ssl_context)


class CatalogClient:
    """Read-only, unauthenticated access to the example repositories."""

    def __init__(self, client: Optional[httpx.Client] = None, org: Optional[str] = None):
        self.client = client if client is not None else default_client()
        self.org = org or os.getenv("SIPGATEIO_GITHUB_ORG") or DEFAULT_ORG

    def _get(self, url: str, params: Optional[dict] = None) -> httpx.Response:
        try:
            response = self.client.get(url, params=params, timeout=30, follow_redirects=True)
        except httpx.HTTPError as e:
            raise CatalogFetchError(f"Request to {url} failed: {e}") from e
        if response.status_code != 200:
            raise CatalogFetchError(
                f"GitHub returned {response.status_code} for {url}\nBody (truncated 400): {response.text[:400]}"
            )
        return response

    def fetch_catalog(self) -> list[ProjectDescriptor]:
        url = f"{GITHUB_API}/orgs/{self.org}/repos"
        repositories = []
        page = 1
        while True:
            response = self._get(url, params={"per_page": PER_PAGE, "page": page})
            try:
                batch = response.json()
            except ValueError as e:
                raise CatalogFetchError(f"Failed to parse repository list: {e}") from e
            if not isinstance(batch, list):
                raise CatalogFetchError(f"Unexpected repository list payload from {url}")
            repositories.extend(batch)
            if len(batch) < PER_PAGE:
                break
            page += 1

        projects = [
            ProjectDescriptor(repo["name"], repo.get("description") or "")
            for repo in repositories
            if repo.get("name", "").startswith(REPO_PREFIX)
        ]
        projects.sort(key=lambda project: project.repository)
        logger.debug("Fetched %d example project(s) from %s", len(projects), self.org)
        return with_tab_offsets(projects)

    def template_url(self, repository: str) -> str:
        return f"{GITHUB_RAW}/{self.org}/{repository}/HEAD/{TEMPLATE_FILENAME}"

    def fetch_template(self, repository: str) -> str:
        return self._get(self.template_url(repository)).text

    def clone_url(self, repository: str) -> str:
        return f"https://github.com/{self.org}/{repository}.git"
