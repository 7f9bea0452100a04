"""LangGraph workflow for analysis attempts and the search fallback."""

from .orchestrator import AnalysisWorkflow, FALLBACK_NOTE

__all__ = ["AnalysisWorkflow", "FALLBACK_NOTE"]
