# Application Stats Package
from .metrics_calculator import EnrichedStats, MetricsCalculator
from .service import DeckStats, DeckStatsService

__all__ = ["MetricsCalculator", "EnrichedStats", "DeckStats", "DeckStatsService"]
