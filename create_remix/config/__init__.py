from .catalog import Catalog, CatalogEntry
from .request import AppCreationRequest, Lang

__all__ = [
    'AppCreationRequest',
    'Catalog',
    'CatalogEntry',
    'Lang',
]
