from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any, Literal

from rich.console import Console
from rich.markup import escape

from .config import AppCreationRequest, Catalog
from .exception import (
    ConversionError,
    CreateRemixException,
    CreateRemixPluginException,
    DestinationExistsError,
)
from .extract import ExtractionResult
from .install import install_dependencies
from .logging import get_logger
from .plugin import CreateRemixPlugin, load_plugins
from .source import resolve

logger = get_logger('app')

Stage = Literal['on_resolve', 'post_extract', 'convert', 'finalize']

TYPESCRIPT_SUFFIXES = ('.ts', '.tsx')


def validate_destination(project_dir: Path) -> None:
    """Make sure the project directory is free to be populated.

    Args:
        project_dir (Path): The directory the app will be created in.

    Raises:
        DestinationExistsError: If the path is a file or a non-empty directory.
    """
    if not project_dir.exists():
        return
    if not project_dir.is_dir() or any(project_dir.iterdir()):
        raise DestinationExistsError(path=project_dir)


def has_typescript_sources(project_dir: Path) -> bool:
    """Determine if a project holds TypeScript sources outside `node_modules`."""
    return any(
        path.suffix in TYPESCRIPT_SUFFIXES and 'node_modules' not in path.parts
        for path in project_dir.rglob('*')
        if path.is_file()
    )


def _run_hook(plugin: CreateRemixPlugin, stage: Stage, *args: Any) -> Any:
    try:
        return getattr(plugin, stage)(*args)
    except CreateRemixException:
        raise
    except Exception as e:
        raise CreateRemixPluginException(
            plugin_name=type(plugin).__name__, stage=stage, message=str(e)
        ) from e


def create_app(
    request: AppCreationRequest,
    *,
    catalog: Catalog | None = None,
    plugins: Sequence[type[CreateRemixPlugin]] | None = None,
    console: Console | None = None,
) -> ExtractionResult:
    """Create a new project from a template reference.

    Nothing is written until the reference has been resolved and the template
    is known to be retrievable. A failure while extracting leaves the files
    written so far in place.

    Args:
        request (AppCreationRequest): What to create and where.
        catalog (Catalog | None): The curated names for bare references.
        plugins (Sequence[type[CreateRemixPlugin]] | None): The plugins to run.
            Defaults to every registered plugin. Plugins the template ships in
            `remix.init` are always added after extraction.
        console (Console | None): Where progress is reported.

    Returns:
        ExtractionResult: The number of files written.

    Raises:
        ConversionError: If JavaScript was requested and TypeScript sources
            remain after the `convert` hooks ran.
    """
    console = console or Console(soft_wrap=True)
    project_dir = request.project_dir.resolve()

    validate_destination(project_dir)
    source = resolve(request.from_, request.lang, request.github_pat, catalog=catalog)

    if plugins is None:
        plugins = list(CreateRemixPlugin.plugins)
    instances = [plugin_cls(request=request) for plugin_cls in plugins]
    for plugin in instances:
        _run_hook(plugin, 'on_resolve', source)

    if not request.quiet:
        console.print(f'Downloading template from [bold]{escape(source.name)}[/bold]')
    result = source.download(project_dir, credential=request.github_pat)
    project_dir.mkdir(parents=True, exist_ok=True)

    # plugins shipped with the template join once its files are on disk
    instances.extend(
        plugin_cls(request=request) for plugin_cls in load_plugins(project_dir)
    )
    for plugin in instances:
        _run_hook(plugin, 'post_extract', result)

    if request.lang == 'js':
        converted = False
        for plugin in instances:
            if _run_hook(plugin, 'convert', result) is True:
                converted = True
                break
        if not converted and has_typescript_sources(project_dir):
            raise ConversionError(path=project_dir)
        if not converted:
            logger.debug('No TypeScript sources to convert in %s', project_dir)

    if request.install:
        if not request.quiet:
            console.print(f'Installing dependencies with {request.package_manager}')
        install_dependencies(project_dir, request.package_manager)

    for plugin in instances:
        _run_hook(plugin, 'finalize')

    if not request.quiet:
        console.print(
            f'[green]✔[/green] Created {result.file_count} files in '
            f'[bold]{escape(str(project_dir))}[/bold]'
        )
    return result
