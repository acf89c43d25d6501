# Infrastructure Adapters Package
from .catalog_file import YamlCatalogRepository
from .state_store import InMemoryStateStore, JsonFileStateStore

__all__ = ["YamlCatalogRepository", "InMemoryStateStore", "JsonFileStateStore"]
