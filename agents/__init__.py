# =============================================================================
# agents/ - AI Agent Definitions
# =============================================================================
# This package contains the LLM side of the pipeline:
# - analyst.py: Turns a transcript into a JSON analysis and a text summary
#
# Prompts:
# - prompts/analysis_prompts.py: System prompt and prompt builders
# =============================================================================

from agents.analyst import AnalysisError, AnalystAgent

__all__ = [
    "AnalysisError",
    "AnalystAgent",
]
