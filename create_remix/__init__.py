from .app import create_app
from .config import AppCreationRequest, Catalog
from .exception import (
    ConversionError,
    CreateRemixException,
    DestinationExistsError,
    ExtractionError,
    NetworkError,
    NotFoundError,
    RateLimitError,
    ReferenceParseError,
)
from .extract import ExtractionResult
from .plugin import CreateRemixPlugin
from .source import (
    LocalDirectorySource,
    LocalTarballSource,
    RemoteSource,
    Source,
    resolve,
)

__version__ = '1.0.0'

__all__ = [
    'AppCreationRequest',
    'Catalog',
    'ConversionError',
    'CreateRemixException',
    'CreateRemixPlugin',
    'DestinationExistsError',
    'ExtractionError',
    'ExtractionResult',
    'LocalDirectorySource',
    'LocalTarballSource',
    'NetworkError',
    'NotFoundError',
    'RateLimitError',
    'ReferenceParseError',
    'RemoteSource',
    'Source',
    'create_app',
    'resolve',
]
