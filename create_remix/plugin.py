from __future__ import annotations

import sys
from importlib.util import module_from_spec, spec_from_file_location
from pathlib import Path
from typing import TYPE_CHECKING

from .exception import CreateRemixPluginException
from .logging import get_logger

if TYPE_CHECKING:
    from .config import AppCreationRequest
    from .extract import ExtractionResult
    from .source import Source

logger = get_logger('plugin')

PLUGIN_DIR = 'remix.init'


class CreateRemixPlugin:
    """Base class for create-remix plugins.

    Subclasses are registered automatically unless their name starts with an
    underscore, and are instantiated once per created app. Templates ship
    their plugins as Python modules in a `remix.init` directory.
    """

    plugins: list[type[CreateRemixPlugin]] = []

    def __init_subclass__(cls) -> None:
        if not cls.__name__.startswith('_'):
            cls.plugins.append(cls)
        return super().__init_subclass__()

    def __init__(self, *, request: AppCreationRequest) -> None:
        self.request = request

    @property
    def project_dir(self) -> Path:
        """The directory the app is created in."""
        return self.request.project_dir

    def on_resolve(self, source: Source) -> None:
        """Hook called once the template reference is resolved.

        Only plugins registered before the template is retrieved see this
        stage.

        Args:
            source (Source): The resolved template location.
        """
        pass

    def post_extract(self, result: ExtractionResult) -> None:
        """Hook called after the template files have been written.

        Args:
            result (ExtractionResult): The outcome of the extraction.
        """
        pass

    def convert(self, result: ExtractionResult) -> bool | None:
        """Hook to convert a TypeScript template to JavaScript.

        Only called when the request asks for JavaScript.

        Args:
            result (ExtractionResult): The outcome of the extraction.

        Returns:
            bool | None: True if the project was converted.
        """
        pass

    def finalize(self) -> None:
        """Hook called after dependencies have been installed."""
        pass


def load_plugins(project_dir: Path) -> list[type[CreateRemixPlugin]]:
    """Load the plugins a template ships in its `remix.init` directory.

    Args:
        project_dir (Path): The directory the template was written to.

    Returns:
        list[type[CreateRemixPlugin]]: The plugin classes the modules
            registered, in load order.

    Raises:
        CreateRemixPluginException: If a plugin module fails to execute.
    """
    plugin_dir = project_dir / PLUGIN_DIR
    if not plugin_dir.is_dir():
        return []

    registered = len(CreateRemixPlugin.plugins)
    for script_file in sorted(plugin_dir.glob('*.py')):
        module_name = f'create_remix_init_{script_file.stem}'
        spec = spec_from_file_location(module_name, script_file)
        if spec and spec.loader:
            logger.debug('Loading plugin module %s', script_file)
            module = module_from_spec(spec)
            sys.modules[module_name] = module
            try:
                spec.loader.exec_module(module)
            except Exception as e:
                raise CreateRemixPluginException(
                    plugin_name=script_file.name, stage='load', message=str(e)
                ) from e
    return CreateRemixPlugin.plugins[registered:]
