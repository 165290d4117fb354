"""Sales analytics pipeline over a MongoDB collection."""

from .analysis import AnalysisResult, analyze
from .pipeline import SalesAnalyticsPipeline, export_collection
from .store import SalesStore

__all__ = [
    "AnalysisResult",
    "analyze",
    "SalesAnalyticsPipeline",
    "SalesStore",
    "export_collection",
]

__version__ = "0.1.0"
