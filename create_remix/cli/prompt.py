from __future__ import annotations

from pathlib import Path
from typing import Any

import questionary
import typer

from ..config import Catalog

DEFAULT_PROJECT_DIR = './my-remix-app'


def _ask(question: questionary.Question) -> Any:
    answer = question.ask()
    if answer is None:
        # questionary returns None when the prompt is interrupted
        raise typer.Abort()
    return answer


def _validate_required(answer: str) -> bool | str:
    if answer.strip() == '':
        return 'This field is required.'
    return True


def ask_project_dir(default: str = DEFAULT_PROJECT_DIR) -> Path:
    """Ask where the app should be created."""
    answer = _ask(
        questionary.text(
            'Where would you like to create your app?',
            default=default,
            validate=_validate_required,
        )
    )
    return Path(answer.strip())


def ask_template(catalog: Catalog) -> str:
    """Ask which curated template to start from."""
    choices = [
        questionary.Choice(
            title=(
                f'{entry.name} - {entry.description}'
                if entry.description
                else entry.name
            ),
            value=entry.name,
        )
        for entry in catalog.templates
    ]
    default = next(
        (choice for choice in choices if choice.value == catalog.default_template),
        None,
    )
    return _ask(
        questionary.select(
            'What type of app do you want to create?',
            choices=choices,
            default=default,
        )
    )


def ask_typescript() -> bool:
    """Ask whether the app should be written in TypeScript."""
    return _ask(
        questionary.select(
            'TypeScript or JavaScript?',
            choices=[
                questionary.Choice(title='TypeScript', value=True),
                questionary.Choice(title='JavaScript', value=False),
            ],
        )
    )


def ask_install(package_manager: str) -> bool:
    """Ask whether dependencies should be installed right away."""
    return _ask(
        questionary.confirm(
            f'Do you want me to run `{package_manager} install`?', default=True
        )
    )
