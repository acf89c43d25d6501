"""
Adapter Factory
Centralizes the logic for selecting storage and catalog adapters.
"""

from flashdrill.application.config import AppConfig
from flashdrill.application.progress import DailyProgress
from flashdrill.application.scheduler import Scheduler
from flashdrill.application.study import StudySession
from flashdrill.domain.exceptions import CatalogError
from flashdrill.domain.review.ports import CatalogRepository, StateStore
from flashdrill.infrastructure.adapters.catalog_file import YamlCatalogRepository
from flashdrill.infrastructure.adapters.state_store import (
    InMemoryStateStore,
    JsonFileStateStore,
)


def get_state_store(config: AppConfig) -> StateStore:
    """
    Returns the StateStore implementation selected by config.
    """
    if config.store_backend == "memory":
        return InMemoryStateStore()
    return JsonFileStateStore(config.state_file)


def get_catalog_repository(config: AppConfig) -> CatalogRepository:
    if config.catalog_file is None:
        raise CatalogError(
            "No catalog configured. Pass --catalog or set FLASHDRILL_CATALOG_FILE."
        )
    return YamlCatalogRepository(config.catalog_file)


def build_study_session(config: AppConfig) -> StudySession:
    """
    Wire a StudySession from config. Scheduler and progress share one store.
    """
    store = get_state_store(config)
    cards = get_catalog_repository(config).load_cards()
    return StudySession(
        scheduler=Scheduler(store),
        progress=DailyProgress(store),
        cards=cards,
        shuffle=config.shuffle_catalog,
    )
