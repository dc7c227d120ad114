import os
from pathlib import Path
from typing import Annotated

import typer
from rich import print
from rich.console import Console
from rich.markup import escape

from .. import __version__
from ..app import create_app
from ..config import AppCreationRequest, Catalog
from ..exception import CreateRemixException
from ..install import detect_package_manager
from ..logging import configure_logging
from . import prompt

app = typer.Typer(
    add_completion=False,
    context_settings={'help_option_names': ['-h', '--help']},
)

err_console = Console(stderr=True, soft_wrap=True)

EPILOG = """\
Examples:

  create-remix

  create-remix --template indie-stack

  create-remix --template :username/:repo

  create-remix --template https://github.com/:username/:repo/tree/:branch

  create-remix --template https://github.com/:username/:repo/archive/refs/tags/:tag.tar.gz

  create-remix --template https://example.com/remix-stack.tar.gz

  create-remix --template /my/remix-stack

  create-remix --template /my/remix-stack.tar.gz

  create-remix --template file:///my/remix-stack.tar.gz
"""


def version_callback(value: bool) -> None:
    if value:
        print(__version__)
        raise typer.Exit()


@app.command(epilog=EPILOG)
def main(
    *,
    project_dir: Annotated[
        Path | None,
        typer.Argument(
            help='Directory to create the app in (prompted for if omitted).',
            show_default=False,
        ),
    ] = None,
    template: Annotated[
        str | None,
        typer.Option(
            '--template',
            '-t',
            help='The template to use for the app.',
        ),
    ] = None,
    typescript: Annotated[
        bool | None,
        typer.Option(
            '--typescript/--no-typescript',
            help='Write the app in TypeScript or JavaScript.',
            show_default=False,
        ),
    ] = None,
    install: Annotated[
        bool | None,
        typer.Option(
            '--install/--no-install',
            help='Install dependencies after creating the app.',
            show_default=False,
        ),
    ] = None,
    package_manager: Annotated[
        str | None,
        typer.Option(
            '--package-manager',
            help='Package manager used to install dependencies.',
            show_default=False,
        ),
    ] = None,
    github_token: Annotated[
        str | None,
        typer.Option(
            '--github-token',
            envvar='GITHUB_TOKEN',
            show_envvar=True,
            help='GitHub token for private repositories and higher rate limits.',
        ),
    ] = None,
    quiet: Annotated[
        bool,
        typer.Option(
            '--quiet',
            '-q',
            help='Do not report progress.',
        ),
    ] = False,
    debug: Annotated[
        bool,
        typer.Option(
            '--debug',
            help='Print debug logs.',
        ),
    ] = False,
    version: Annotated[
        bool | None,
        typer.Option(
            '--version',
            '-v',
            callback=version_callback,
            is_eager=True,
            help='Show the version of this script.',
        ),
    ] = None,
) -> None:
    """Create a new Remix app."""
    configure_logging(verbose=debug)
    catalog = Catalog.load(remote=True)

    if package_manager is None:
        package_manager = detect_package_manager(
            os.environ.get('npm_config_user_agent')
        )

    if not quiet and (project_dir is None or template is None):
        print("💿 Welcome to Remix! Let's get you set up with a new project.")

    # ask for whatever was not given on the command line
    if project_dir is None:
        project_dir = prompt.ask_project_dir()
    if template is None:
        template = prompt.ask_template(catalog)
    if typescript is None:
        typescript = prompt.ask_typescript()
    if install is None:
        install = prompt.ask_install(package_manager)

    request = AppCreationRequest(
        from_=template,
        lang='ts' if typescript else 'js',
        project_dir=project_dir,
        install=install,
        quiet=quiet,
        github_pat=github_token,
        package_manager=package_manager,
    )

    try:
        create_app(request, catalog=catalog)
    except CreateRemixException as e:
        err_console.print(f'[red]Error:[/red] {escape(str(e))}')
        raise typer.Exit(code=1)


if __name__ == '__main__':
    app()
