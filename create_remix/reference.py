from __future__ import annotations

import re
from enum import Enum
from pathlib import Path
from urllib.parse import unquote, urlparse
from urllib.request import url2pathname

from pydantic import BaseModel, ConfigDict

from .exception import ReferenceParseError
from .logging import get_logger

logger = get_logger('reference')

DEFAULT_REF = 'main'
ARCHIVE_EXTENSIONS = ('.tar.gz', '.tgz', '.tar')
GITHUB_HOSTS = ('github.com', 'www.github.com')

# third path segments of github.com URLs that address a downloadable file
# rather than a repository tree
_GITHUB_DOWNLOAD_SEGMENTS = ('archive', 'blob', 'raw', 'releases')

_SHORTHAND_PATTERN = re.compile(
    r'^(?P<owner>[A-Za-z0-9][A-Za-z0-9-]*)/(?P<repo>[\w.-]+)(?:/(?P<sub_path>.*))?$'
)


class ReferenceShape(Enum):
    """The kinds of template reference, in classification order."""

    LOCAL_DIRECTORY = 'local-directory'
    LOCAL_TARBALL = 'local-tarball'
    FILE_URL = 'file-url'
    REMOTE_TARBALL_URL = 'remote-tarball-url'
    GITHUB_TREE_URL = 'github-tree-url'
    GITHUB_SHORTHAND = 'github-shorthand'
    BARE_NAME = 'bare-name'


class GitHubCoordinates(BaseModel):
    """A repository, ref and sub-directory on GitHub."""

    model_config = ConfigDict(frozen=True)

    owner: str
    repo: str
    ref: str = DEFAULT_REF
    sub_path: str = ''

    @property
    def tarball_url(self) -> str:
        """The codeload URL serving a tarball of the whole repository at `ref`."""
        return (
            f'https://codeload.github.com/{self.owner}/{self.repo}/tar.gz/{self.ref}'
        )


class TemplateReference(BaseModel):
    """A raw template reference together with its classified shape."""

    model_config = ConfigDict(frozen=True)

    raw: str
    shape: ReferenceShape

    def github_coordinates(self) -> GitHubCoordinates:
        """Decompose a GitHub URL or shorthand reference.

        Returns:
            GitHubCoordinates: The repository the reference points at.

        Raises:
            ReferenceParseError: If the reference is not a well-formed GitHub
                tree URL or shorthand.
        """
        if self.shape is ReferenceShape.GITHUB_TREE_URL:
            return _coordinates_from_url(self.raw)
        if self.shape is ReferenceShape.GITHUB_SHORTHAND:
            return _coordinates_from_shorthand(self.raw)
        raise ValueError(f'{self.shape.value} references have no GitHub coordinates.')

    def local_path(self) -> Path:
        """The filesystem path of a local directory, tarball or file URL."""
        if self.shape is ReferenceShape.FILE_URL:
            parsed = urlparse(self.raw)
            return Path(url2pathname(parsed.path))
        if self.shape in (ReferenceShape.LOCAL_DIRECTORY, ReferenceShape.LOCAL_TARBALL):
            return Path(self.raw).expanduser()
        raise ValueError(f'{self.shape.value} references have no local path.')


def classify(raw: str) -> TemplateReference:
    """Classify a template reference. The first matching shape wins.

    Args:
        raw (str): The reference as supplied by the user.

    Returns:
        TemplateReference: The classified reference.

    Raises:
        ReferenceParseError: If the reference is empty or looks like an HTTP(S)
            URL but cannot be parsed as one.
    """
    if not raw.strip():
        raise ReferenceParseError(
            reference=raw, message='The template reference must not be empty.'
        )

    shape = _classify_shape(raw)
    logger.debug('Classified "%s" as %s', raw, shape.value)
    return TemplateReference(raw=raw, shape=shape)


def is_archive_name(name: str) -> bool:
    """Determine if a file name carries a recognized archive extension."""
    return name.lower().endswith(ARCHIVE_EXTENSIONS)


def _existing_path(raw: str) -> Path | None:
    try:
        path = Path(raw).expanduser()
        return path if path.exists() else None
    except (OSError, RuntimeError, ValueError):
        # not something the filesystem accepts as a path, e.g. an unknown
        # `~user` or a name that is too long
        return None


def _classify_shape(raw: str) -> ReferenceShape:
    path = _existing_path(raw)
    if path is not None and path.is_dir():
        return ReferenceShape.LOCAL_DIRECTORY
    if path is not None and path.is_file() and is_archive_name(raw):
        return ReferenceShape.LOCAL_TARBALL
    if raw.startswith('file://'):
        return ReferenceShape.FILE_URL

    if raw.startswith(('http://', 'https://')):
        try:
            parsed = urlparse(raw)
            hostname = parsed.hostname
        except ValueError as e:
            raise ReferenceParseError(reference=raw) from e
        if not hostname:
            raise ReferenceParseError(reference=raw)
        if hostname in GITHUB_HOSTS and not _is_github_download(parsed.path):
            return ReferenceShape.GITHUB_TREE_URL
        return ReferenceShape.REMOTE_TARBALL_URL

    if _SHORTHAND_PATTERN.match(raw):
        return ReferenceShape.GITHUB_SHORTHAND
    return ReferenceShape.BARE_NAME


def _is_github_download(url_path: str) -> bool:
    segments = [segment for segment in url_path.split('/') if segment]
    if is_archive_name(url_path):
        return True
    return len(segments) > 2 and segments[2] in _GITHUB_DOWNLOAD_SEGMENTS


def _coordinates_from_url(raw: str) -> GitHubCoordinates:
    segments = [segment for segment in urlparse(raw).path.split('/') if segment]
    if len(segments) < 2:
        raise ReferenceParseError(
            reference=raw,
            message=f'"{raw}" does not point at a GitHub repository.',
        )

    owner, repo, *rest = (unquote(segment) for segment in segments)
    repo = repo.removesuffix('.git')
    if not rest:
        return GitHubCoordinates(owner=owner, repo=repo)
    if rest[0] != 'tree' or len(rest) < 2:
        raise ReferenceParseError(
            reference=raw,
            message=(
                f'"{raw}" is not a GitHub repository URL. Expected '
                'https://github.com/<owner>/<repo>/tree/<ref>/<path>.'
            ),
        )
    return GitHubCoordinates(
        owner=owner,
        repo=repo,
        ref=rest[1],
        sub_path='/'.join(rest[2:]),
    )


def _coordinates_from_shorthand(raw: str) -> GitHubCoordinates:
    match = _SHORTHAND_PATTERN.match(raw)
    if match is None:
        raise ReferenceParseError(reference=raw)
    sub_path = match['sub_path'] or ''
    return GitHubCoordinates(
        owner=match['owner'],
        repo=match['repo'].removesuffix('.git'),
        sub_path='/'.join(segment for segment in sub_path.split('/') if segment),
    )
