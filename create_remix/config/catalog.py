from __future__ import annotations

import re
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict

from ..exception import ReferenceParseError
from ..fetch import github_path_exists
from ..logging import get_logger
from ..reference import DEFAULT_REF, GitHubCoordinates

logger = get_logger('catalog')

DEFAULT_CATALOG_FILE = Path(__file__).with_name('catalog.yaml')

_NAME_PATTERN = re.compile(r'^[\w.-]+$')


class CatalogEntry(BaseModel):
    """A curated example or template."""

    name: str
    description: str | None = None


class Catalog(BaseModel):
    """The curated names that can be used as template references.

    Examples live in a sub-directory of the main repository, templates are
    repositories of their own under the same owner.
    """

    owner: str = 'remix-run'
    repo: str = 'remix'
    ref: str = DEFAULT_REF
    examples_dir: str = 'examples'
    examples: list[CatalogEntry] = []
    templates: list[CatalogEntry] = []
    default_template: str

    # ask GitHub about names missing from the curated lists
    remote: bool = False

    model_config = ConfigDict(extra='ignore')

    @classmethod
    def load(cls, path: Path | None = None, *, remote: bool = False) -> Catalog:
        """Load a catalog from a YAML file.

        Args:
            path (Path | None): The catalog file. Defaults to the bundled one.
            remote (bool): Look up unknown names on GitHub.

        Returns:
            Catalog: The validated catalog.
        """
        path = path or DEFAULT_CATALOG_FILE
        with path.open('r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
        catalog = cls.model_validate(data)
        catalog.remote = remote
        return catalog

    def example_coordinates(self, name: str) -> GitHubCoordinates:
        return GitHubCoordinates(
            owner=self.owner,
            repo=self.repo,
            ref=self.ref,
            sub_path=f'{self.examples_dir}/{name}',
        )

    def template_coordinates(self, name: str) -> GitHubCoordinates:
        return GitHubCoordinates(owner=self.owner, repo=name, ref=DEFAULT_REF)

    def is_example(self, name: str, credential: str | None = None) -> bool:
        if any(entry.name == name for entry in self.examples):
            return True
        if not self.remote:
            return False
        return github_path_exists(
            f'https://api.github.com/repos/{self.owner}/{self.repo}'
            f'/contents/{self.examples_dir}/{name}?ref={self.ref}',
            credential,
        )

    def is_template(self, name: str, credential: str | None = None) -> bool:
        if any(entry.name == name for entry in self.templates):
            return True
        if not self.remote:
            return False
        return github_path_exists(
            f'https://api.github.com/repos/{self.owner}/{name}', credential
        )

    def lookup(self, name: str, credential: str | None = None) -> GitHubCoordinates:
        """Map a bare name to the GitHub location it stands for.

        Args:
            name (str): The bare name.
            credential (str | None): A GitHub token for remote lookups.

        Returns:
            GitHubCoordinates: The example or template location.

        Raises:
            ReferenceParseError: If the name is neither an example nor a template.
        """
        if not _NAME_PATTERN.match(name):
            raise ReferenceParseError(reference=name)
        if self.is_example(name, credential):
            logger.debug('"%s" is an example', name)
            return self.example_coordinates(name)
        if self.is_template(name, credential):
            logger.debug('"%s" is a template', name)
            return self.template_coordinates(name)
        raise ReferenceParseError(reference=name)
