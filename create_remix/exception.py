from pathlib import Path
from typing import Literal


class CreateRemixException(Exception):
    """Base exception for create-remix."""

    pass


class CreateRemixPluginException(CreateRemixException):
    """Exception for plugin hook errors."""

    def __init__(
        self,
        *,
        plugin_name: str,
        stage: Literal['load', 'on_resolve', 'post_extract', 'convert', 'finalize'],
        message: str,
    ):
        self.plugin_name = plugin_name
        self.stage = stage
        super().__init__(
            f"Error in plugin '{plugin_name}' during stage '{stage}': {message}"
        )


class ReferenceParseError(CreateRemixException):
    """Exception for template references that cannot be resolved."""

    def __init__(self, *, reference: str, message: str | None = None):
        self.reference = reference
        super().__init__(
            message or f'Unable to parse the URL "{reference}" as a URL.'
        )


class FetchException(CreateRemixException):
    """Exception for failures while retrieving a template."""

    pass


class NotFoundError(FetchException):
    """Exception for a repository, ref or path that does not exist."""

    def __init__(self, *, url: str, path: str | None = None):
        self.url = url
        self.path = path
        if path:
            super().__init__(f'The path "{path}" was not found in "{url}".')
        else:
            super().__init__(f'The template "{url}" was not found.')


class RateLimitError(FetchException):
    """Exception for an exhausted GitHub rate limit."""

    def __init__(self, *, url: str):
        self.url = url
        super().__init__(
            f'GitHub rate limit exceeded while requesting "{url}". '
            'Provide a GitHub token to raise the limit.'
        )


class NetworkError(FetchException):
    """Exception for transport failures and unexpected HTTP responses."""

    def __init__(self, *, url: str, message: str):
        self.url = url
        super().__init__(f'Unable to download "{url}": {message}')


class DestinationExistsError(CreateRemixException):
    """Exception for a project directory that is already in use."""

    def __init__(self, *, path: Path):
        self.path = path
        super().__init__(
            f'"{path}" already exists and is not empty. '
            'Please try again with a different directory.'
        )


class ExtractionError(CreateRemixException):
    """Exception for corrupt archives and filesystem write failures."""

    def __init__(self, *, message: str):
        super().__init__(message)


class InstallError(CreateRemixException):
    """Exception for a failed dependency install."""

    def __init__(self, *, command: list[str], message: str):
        self.command = command
        super().__init__(f'Command "{" ".join(command)}" failed: {message}')


class ConversionError(CreateRemixException):
    """Exception for a JavaScript app whose template was left in TypeScript."""

    def __init__(self, *, path: Path):
        self.path = path
        super().__init__(
            f'The template written to "{path}" contains TypeScript sources and no '
            'plugin converted them to JavaScript. Choose TypeScript, or use a '
            'template that ships a converter in remix.init.'
        )
