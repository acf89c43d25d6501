# Domain Review Package
from .models import Card, GlobalStats, ReviewStat
from .ports import CatalogRepository, StateStore

__all__ = ["Card", "GlobalStats", "ReviewStat", "CatalogRepository", "StateStore"]
