from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Lang = Literal['ts', 'js']


class AppCreationRequest(BaseModel):
    """A request to create a project from a template reference."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_: str = Field(alias='from')
    lang: Lang = 'ts'
    project_dir: Path
    install: bool = True
    quiet: bool = False
    github_pat: str | None = None
    package_manager: str = 'npm'
