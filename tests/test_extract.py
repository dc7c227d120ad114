import io
import os
from pathlib import Path

import pytest

from create_remix.exception import ExtractionError
from create_remix.extract import copy_directory, extract


def _tree(root: Path) -> set[str]:
    return {
        path.relative_to(root).as_posix()
        for path in root.rglob('*')
        if path.is_file()
    }


def test_extract_strips_wrapper(
    snkrs_tarball: bytes, snkrs_files: dict[str, bytes], tmp_path: Path
) -> None:
    destination = tmp_path / 'app'
    result = extract(io.BytesIO(snkrs_tarball), '', destination)

    assert result.file_count == len(snkrs_files)
    assert result.root == destination
    assert _tree(destination) == set(snkrs_files)
    package_json = (destination / 'package.json').read_bytes()
    assert package_json == snkrs_files['package.json']
    assert not (destination / 'snkrs-main').exists()


@pytest.mark.parametrize('file_path', ['examples/basic', '/examples/basic/'])
def test_extract_sub_path(snkrs_tarball: bytes, tmp_path: Path, file_path: str) -> None:
    destination = tmp_path / 'app'
    result = extract(io.BytesIO(snkrs_tarball), file_path, destination)

    # examples/basicx shares the string prefix but is a different directory
    assert _tree(destination) == {'package.json', 'app/root.tsx'}
    assert result.file_count == 2
    assert (destination / 'package.json').read_bytes() == b'{"name": "basic"}\n'


def test_extract_file_shaped_sub_path(snkrs_tarball: bytes, tmp_path: Path) -> None:
    destination = tmp_path / 'app'
    result = extract(io.BytesIO(snkrs_tarball), 'app/root.tsx', destination)
    assert result.file_count == 1
    assert _tree(destination) == {'root.tsx'}


def test_extract_without_match_creates_nothing(
    snkrs_tarball: bytes, tmp_path: Path
) -> None:
    destination = tmp_path / 'app'
    result = extract(io.BytesIO(snkrs_tarball), 'examples/missing', destination)
    assert result.file_count == 0
    assert not destination.exists()


def test_extract_preserves_executable_bit(snkrs_tarball: bytes, tmp_path: Path) -> None:
    destination = tmp_path / 'app'
    extract(io.BytesIO(snkrs_tarball), '', destination)
    assert os.access(destination / 'bin' / 'setup', os.X_OK)
    assert not os.access(destination / 'package.json', os.X_OK)


def test_extract_plain_tar(tarball_builder, tmp_path: Path) -> None:
    archive = tarball_builder({'index.ts': b'export {}\n'}, wrapper='stack', mode='w')
    destination = tmp_path / 'app'
    extract(io.BytesIO(archive), '', destination)
    assert _tree(destination) == {'index.ts'}


def test_extract_dot_wrapper(tarball_builder, tmp_path: Path) -> None:
    archive = tarball_builder({'index.ts': b'export {}\n'}, wrapper='.')
    destination = tmp_path / 'app'
    extract(io.BytesIO(archive), '', destination)
    assert _tree(destination) == {'index.ts'}


def test_extract_skips_escaping_paths(tarball_builder, tmp_path: Path) -> None:
    archive = tarball_builder(
        {'../evil.txt': b'nope', 'ok.txt': b'ok'}, wrapper='repo-main'
    )
    destination = tmp_path / 'app'
    extract(io.BytesIO(archive), '', destination)
    assert _tree(destination) == {'ok.txt'}
    assert not (tmp_path / 'evil.txt').exists()


def test_extract_recreates_symlinks(tarball_builder, tmp_path: Path) -> None:
    archive = tarball_builder(
        {'docs/README.md': b'# docs\n'},
        wrapper='repo-main',
        links={'README.md': 'docs/README.md'},
    )
    destination = tmp_path / 'app'
    result = extract(io.BytesIO(archive), '', destination)

    readme = destination / 'README.md'
    assert readme.is_symlink()
    assert os.readlink(readme) == 'docs/README.md'
    assert readme.read_bytes() == b'# docs\n'
    assert result.file_count == 1


def test_extract_symlinks_below_sub_path(tarball_builder, tmp_path: Path) -> None:
    archive = tarball_builder(
        {'examples/basic/app/root.tsx': b'export {}\n'},
        wrapper='repo-main',
        links={'examples/basic/root.tsx': 'app/root.tsx'},
    )
    destination = tmp_path / 'app'
    extract(io.BytesIO(archive), 'examples/basic', destination)
    assert (destination / 'root.tsx').is_symlink()
    assert (destination / 'root.tsx').read_bytes() == b'export {}\n'


@pytest.mark.parametrize('target', ['../../outside.txt', '/etc/passwd'])
def test_extract_skips_symlinks_leaving_destination(
    tarball_builder, tmp_path: Path, target: str
) -> None:
    archive = tarball_builder(
        {'ok.txt': b'ok'}, wrapper='repo-main', links={'escape.txt': target}
    )
    destination = tmp_path / 'app'
    extract(io.BytesIO(archive), '', destination)
    assert not (destination / 'escape.txt').is_symlink()
    assert _tree(destination) == {'ok.txt'}


def test_extract_corrupt_archive(tmp_path: Path) -> None:
    with pytest.raises(ExtractionError, match='Unable to read'):
        extract(io.BytesIO(b'this is not a tarball'), '', tmp_path / 'app')


def test_extract_write_failure(snkrs_tarball: bytes, tmp_path: Path) -> None:
    destination = tmp_path / 'app'
    destination.write_text('occupied')
    with pytest.raises(ExtractionError, match='Unable to write'):
        extract(io.BytesIO(snkrs_tarball), '', destination)


def test_copy_directory(
    template_dir: Path, snkrs_files: dict[str, bytes], tmp_path: Path
) -> None:
    destination = tmp_path / 'app'
    result = copy_directory(template_dir, destination)

    assert _tree(destination) == set(snkrs_files)
    assert result.file_count == len(snkrs_files)
    assert not (destination / 'node_modules').exists()
    assert os.access(destination / 'bin' / 'setup', os.X_OK)


def test_copy_directory_keeps_symlinks(template_dir: Path, tmp_path: Path) -> None:
    (template_dir / 'README.link').symlink_to('README.md')
    destination = tmp_path / 'app'
    copy_directory(template_dir, destination)
    assert (destination / 'README.link').is_symlink()
    assert os.readlink(destination / 'README.link') == 'README.md'


def test_copy_directory_into_itself(template_dir: Path) -> None:
    with pytest.raises(ExtractionError, match='its own subdirectory'):
        copy_directory(template_dir, template_dir / 'app')
