"""Job offer analysis, archive and side-by-side comparison."""

from .models import AnalysisResult, OfferInput, SavedOffer
from .engine import AnalysisClient
from .memory.offer_store import OfferStore
from .ranking.comparison import ComparisonEngine, ComparisonTable

__all__ = [
    "AnalysisResult",
    "OfferInput",
    "SavedOffer",
    "AnalysisClient",
    "OfferStore",
    "ComparisonEngine",
    "ComparisonTable",
]
