from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import get_args
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict

from .config import Catalog, Lang
from .exception import NotFoundError, ReferenceParseError
from .extract import ExtractionResult, copy_directory, extract
from .fetch import fetch
from .logging import get_logger
from .reference import ReferenceShape, classify

logger = get_logger('source')


class Source(BaseModel, ABC):
    """Abstract base class for resolved template locations."""

    model_config = ConfigDict(frozen=True)

    @abstractmethod
    def download(
        self, path: Path, *, credential: str | None = None
    ) -> ExtractionResult:
        """Materialize the template into the specified path.

        Args:
            path (Path): The project directory to populate.
            credential (str | None): A GitHub token for remote sources.

        Returns:
            ExtractionResult: The number of files written.
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """A human readable description of the location."""
        pass


class RemoteSource(Source):
    """Source representing a tarball served over HTTP(S)."""

    tarball_url: str
    file_path: str = ''

    @property
    def is_github(self) -> bool:
        hostname = urlparse(self.tarball_url).hostname or ''
        return hostname == 'github.com' or hostname.endswith('.github.com')

    def download(
        self, path: Path, *, credential: str | None = None
    ) -> ExtractionResult:
        # only GitHub ever gets to see the token
        with fetch(self.tarball_url, credential if self.is_github else None) as stream:
            result = extract(stream, self.file_path, path)
        if self.file_path and result.file_count == 0:
            raise NotFoundError(url=self.tarball_url, path=self.file_path)
        return result

    @property
    def name(self) -> str:
        if self.file_path:
            return f'{self.tarball_url} ({self.file_path})'
        return self.tarball_url


class LocalDirectorySource(Source):
    """Source representing a directory on disk."""

    path: Path

    def download(
        self, path: Path, *, credential: str | None = None
    ) -> ExtractionResult:
        return copy_directory(self.path, path)

    @property
    def name(self) -> str:
        return str(self.path)


class LocalTarballSource(Source):
    """Source representing a tarball on disk."""

    path: Path
    file_path: str = ''

    def download(
        self, path: Path, *, credential: str | None = None
    ) -> ExtractionResult:
        with self.path.open('rb') as stream:
            result = extract(stream, self.file_path, path)
        if self.file_path and result.file_count == 0:
            raise NotFoundError(url=self.path.as_uri(), path=self.file_path)
        return result

    @property
    def name(self) -> str:
        return str(self.path)


def resolve(
    from_: str,
    lang: Lang = 'ts',
    credential: str | None = None,
    *,
    catalog: Catalog | None = None,
) -> Source:
    """Resolve a template reference to the location it stands for.

    Args:
        from_ (str): The template reference.
        lang (Lang): The language the project will be written in.
        credential (str | None): A GitHub token, used for catalog lookups.
        catalog (Catalog | None): The curated names. Defaults to the bundled
            catalog without remote lookups.

    Returns:
        Source: The resolved location.

    Raises:
        ReferenceParseError: If the reference cannot be resolved.
    """
    if lang not in get_args(Lang):
        raise ValueError(f'Unsupported language: {lang}')

    reference = classify(from_)
    match reference.shape:
        case ReferenceShape.LOCAL_DIRECTORY:
            source = LocalDirectorySource(path=reference.local_path().resolve())

        case ReferenceShape.LOCAL_TARBALL:
            source = LocalTarballSource(path=reference.local_path().resolve())

        case ReferenceShape.FILE_URL:
            local_path = reference.local_path()
            if local_path.is_dir():
                source = LocalDirectorySource(path=local_path.resolve())
            elif local_path.is_file():
                source = LocalTarballSource(path=local_path.resolve())
            else:
                raise ReferenceParseError(
                    reference=from_,
                    message=(
                        f'The file URL "{from_}" does not point at an existing '
                        'path.'
                    ),
                )

        case ReferenceShape.REMOTE_TARBALL_URL:
            source = RemoteSource(tarball_url=from_)

        case ReferenceShape.GITHUB_TREE_URL | ReferenceShape.GITHUB_SHORTHAND:
            coordinates = reference.github_coordinates()
            source = RemoteSource(
                tarball_url=coordinates.tarball_url, file_path=coordinates.sub_path
            )

        case ReferenceShape.BARE_NAME:
            catalog = catalog or Catalog.load()
            coordinates = catalog.lookup(from_, credential)
            source = RemoteSource(
                tarball_url=coordinates.tarball_url, file_path=coordinates.sub_path
            )

    logger.debug('Resolved "%s" to %s', from_, source.name)
    return source
