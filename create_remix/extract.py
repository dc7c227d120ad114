from __future__ import annotations

import shutil
import tarfile
import zlib
from collections.abc import Iterable, Iterator
from pathlib import Path, PurePosixPath
from typing import IO, BinaryIO

from pydantic import BaseModel, ConfigDict

from .exception import ExtractionError
from .logging import get_logger

logger = get_logger('extract')

COPY_IGNORE_PATTERNS = ('.git', 'node_modules')


class ExtractionResult(BaseModel):
    """The outcome of materializing a template."""

    model_config = ConfigDict(frozen=True)

    file_count: int
    root: Path


class ArchiveEntry:
    """A member of a template archive, addressed by its path inside the archive."""

    def __init__(
        self,
        *,
        path: PurePosixPath,
        member: tarfile.TarInfo,
        archive: tarfile.TarFile,
    ) -> None:
        self.path = path
        self.member = member
        self.archive = archive

    def relocate(self, path: PurePosixPath) -> ArchiveEntry:
        """Return the same member addressed by a different path."""
        return ArchiveEntry(path=path, member=self.member, archive=self.archive)

    @property
    def is_file(self) -> bool:
        return self.member.isfile()

    def open(self) -> IO[bytes]:
        """Open the content of a regular file entry.

        Must be called before the archive advances to the next member.
        """
        content = self.archive.extractfile(self.member)
        if content is None:
            raise ExtractionError(
                message=f'Archive entry "{self.path}" has no content.'
            )
        return content


def read_entries(stream: BinaryIO) -> Iterator[ArchiveEntry]:
    """Lazily read the members of a (possibly compressed) tar stream."""
    with tarfile.open(fileobj=stream, mode='r|*') as archive:
        for member in archive:
            yield ArchiveEntry(
                path=PurePosixPath(member.name), member=member, archive=archive
            )


def strip_wrapper(entries: Iterable[ArchiveEntry]) -> Iterator[ArchiveEntry]:
    """Drop the single top-level directory archives are wrapped in."""
    for entry in entries:
        _, _, remainder = entry.member.name.partition('/')
        remainder = remainder.strip('/')
        if not remainder:
            continue  # the wrapper itself, or a stray top-level file
        yield entry.relocate(PurePosixPath(remainder))


def filter_prefix(
    entries: Iterable[ArchiveEntry], file_path: str
) -> Iterator[ArchiveEntry]:
    """Keep only entries below `file_path` and make them relative to it."""
    file_path = file_path.strip('/')
    if not file_path:
        yield from entries
        return

    prefix = PurePosixPath(file_path)
    for entry in entries:
        if entry.path == prefix:
            if entry.is_file:
                yield entry.relocate(PurePosixPath(prefix.name))
            continue
        if entry.path.is_relative_to(prefix):
            yield entry.relocate(entry.path.relative_to(prefix))


def _filtered(entry: ArchiveEntry, destination: Path) -> tarfile.TarInfo | None:
    member = entry.member.replace(name=entry.path.as_posix(), deep=False)
    try:
        return tarfile.data_filter(member, str(destination))
    except tarfile.FilterError as e:
        logger.debug('Skipping "%s": %s', entry.path, e)
        return None


def write_entries(
    entries: Iterable[ArchiveEntry], destination: Path
) -> ExtractionResult:
    """Write archive entries below `destination`.

    Every entry goes through tarfile's `data` filter first. Entries the filter
    rejects, such as paths or link targets outside the destination and device
    files, are skipped. Symlinks are recreated as links and hard links are
    written as copies of their already extracted target. Only regular files
    are counted.

    Args:
        entries (Iterable[ArchiveEntry]): Entries with paths relative to the
            destination.
        destination (Path): The directory to populate. Created on demand.

    Returns:
        ExtractionResult: The number of files written.
    """
    file_count = 0
    written: dict[str, Path] = {}
    for entry in entries:
        member = _filtered(entry, destination)
        if member is None:
            continue

        target_path = destination.joinpath(*entry.path.parts)
        if member.isdir():
            target_path.mkdir(parents=True, exist_ok=True)
            continue

        target_path.parent.mkdir(parents=True, exist_ok=True)
        if member.issym():
            target_path.symlink_to(member.linkname)
            written[entry.member.name.strip('/')] = target_path
            continue
        if member.islnk():
            link_target = written.get(member.linkname.strip('/'))
            if link_target is None:
                logger.debug(
                    'Skipping "%s": hard link target "%s" was not extracted',
                    entry.path,
                    member.linkname,
                )
                continue
            shutil.copy2(link_target, target_path)
        else:
            with entry.open() as content, target_path.open('wb') as f:
                shutil.copyfileobj(content, f)
            if member.mode is not None and member.mode & 0o111:
                target_path.chmod(target_path.stat().st_mode | member.mode & 0o111)

        written[entry.member.name.strip('/')] = target_path
        file_count += 1

    return ExtractionResult(file_count=file_count, root=destination)


def extract(stream: BinaryIO, file_path: str, destination: Path) -> ExtractionResult:
    """Extract a tarball stream into `destination`.

    The wrapper directory is always stripped. When `file_path` is set, only
    entries below it are written, with the prefix stripped as well.

    Args:
        stream (BinaryIO): The gzip-compressed (or plain) tar stream.
        file_path (str): The archive-internal prefix to extract, or ''.
        destination (Path): The directory to populate.

    Returns:
        ExtractionResult: The number of files written.

    Raises:
        ExtractionError: If the archive is corrupt or a file cannot be written.
    """
    entries = filter_prefix(strip_wrapper(read_entries(stream)), file_path)
    try:
        return write_entries(entries, destination)
    except (tarfile.TarError, EOFError, zlib.error) as e:
        raise ExtractionError(
            message=f'Unable to read the template archive: {e}'
        ) from e
    except OSError as e:
        raise ExtractionError(
            message=f'Unable to write the template files: {e}'
        ) from e


def copy_directory(source: Path, destination: Path) -> ExtractionResult:
    """Recursively copy a local template directory into `destination`.

    Symlinks are copied as links, the same way `extract` recreates them.

    Args:
        source (Path): The template directory.
        destination (Path): The directory to populate. May already exist.

    Returns:
        ExtractionResult: The number of files copied.

    Raises:
        ExtractionError: If the destination lies inside the source or a file
            cannot be copied.
    """
    source = source.resolve()
    destination = destination.resolve()
    if destination.is_relative_to(source):
        raise ExtractionError(
            message=(
                f'Cannot copy "{source}" into its own subdirectory '
                f'"{destination}".'
            )
        )

    file_count = 0

    def copy_file(src: str, dst: str) -> str:
        nonlocal file_count
        file_count += 1
        return shutil.copy2(src, dst)

    try:
        shutil.copytree(
            source,
            destination,
            ignore=shutil.ignore_patterns(*COPY_IGNORE_PATTERNS),
            symlinks=True,
            copy_function=copy_file,
            dirs_exist_ok=True,
        )
    except OSError as e:
        raise ExtractionError(message=f'Unable to copy the template files: {e}') from e

    return ExtractionResult(file_count=file_count, root=destination)
