import io
import tarfile
from collections.abc import Callable
from pathlib import Path

import pytest
from pytest_mock import MockerFixture

from create_remix import CreateRemixPlugin

TarballBuilder = Callable[..., bytes]
TarballFactory = Callable[..., Path]

# a repository as codeload would serve it, wrapped in `<repo>-<ref>/`
SNKRS_FILES: dict[str, bytes] = {
    'package.json': b'{"name": "snkrs"}\n',
    'README.md': b'# snkrs\n',
    'app/root.tsx': b'export default function App() {}\n',
    'examples/basic/package.json': b'{"name": "basic"}\n',
    'examples/basic/app/root.tsx': b'export default function Root() {}\n',
    'examples/basicx/package.json': b'{"name": "basicx"}\n',
    'bin/setup': b'#!/bin/sh\necho setup\n',
}


def build_tarball(
    files: dict[str, bytes],
    *,
    wrapper: str | None = 'snkrs-main',
    executables: tuple[str, ...] = ('bin/setup',),
    links: dict[str, str] | None = None,
    mode: str = 'w:gz',
) -> bytes:
    """Build a tarball in memory. `links` maps symlink names to their targets."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode=mode) as archive:
        if wrapper:
            info = tarfile.TarInfo(wrapper)
            info.type = tarfile.DIRTYPE
            info.mode = 0o755
            archive.addfile(info)
        for name, content in files.items():
            info = tarfile.TarInfo(f'{wrapper}/{name}' if wrapper else name)
            info.size = len(content)
            info.mode = 0o755 if name in executables else 0o644
            archive.addfile(info, io.BytesIO(content))
        for name, target in (links or {}).items():
            info = tarfile.TarInfo(f'{wrapper}/{name}' if wrapper else name)
            info.type = tarfile.SYMTYPE
            info.linkname = target
            info.mode = 0o777
            archive.addfile(info)
    return buffer.getvalue()


class FakeResponse:
    """A stand-in for `requests.Response`."""

    def __init__(
        self,
        status_code: int = 200,
        content: bytes = b'',
        headers: dict[str, str] | None = None,
        chunk_size: int = 7,
        error: Exception | None = None,
    ) -> None:
        self.status_code = status_code
        self.content = content
        self.headers = headers or {}
        self.closed = False
        self._chunk_size = chunk_size
        self._error = error

    @property
    def text(self) -> str:
        return self.content.decode('utf-8', errors='replace')

    def iter_content(self, chunk_size: int = 1):
        for start in range(0, len(self.content), self._chunk_size):
            yield self.content[start : start + self._chunk_size]
        if self._error is not None:
            raise self._error

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def snkrs_files() -> dict[str, bytes]:
    return dict(SNKRS_FILES)


@pytest.fixture
def tarball_builder() -> TarballBuilder:
    return build_tarball


@pytest.fixture
def fake_response() -> type[FakeResponse]:
    return FakeResponse


@pytest.fixture
def snkrs_tarball() -> bytes:
    return build_tarball(SNKRS_FILES)


@pytest.fixture
def make_tarball(tmp_path: Path) -> TarballFactory:
    def factory(
        name: str = 'template.tar.gz',
        files: dict[str, bytes] | None = None,
        **kwargs,
    ) -> Path:
        path = tmp_path / name
        path.write_bytes(
            build_tarball(SNKRS_FILES if files is None else files, **kwargs)
        )
        return path

    return factory


@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    root = tmp_path / 'template'
    for name, content in SNKRS_FILES.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
    (root / 'bin' / 'setup').chmod(0o755)
    (root / 'node_modules' / 'left-pad').mkdir(parents=True)
    (root / 'node_modules' / 'left-pad' / 'index.js').write_text('module.exports = 1\n')
    return root


@pytest.fixture
def plugin_registry(mocker: MockerFixture) -> list[type[CreateRemixPlugin]]:
    """An empty plugin registry, discarded after the test."""
    registry: list[type[CreateRemixPlugin]] = []
    mocker.patch.object(CreateRemixPlugin, 'plugins', registry)
    return registry
