# =============================================================================
# agents/prompts/ - System Prompts for AI Agents
# =============================================================================
# - analysis_prompts.py: Transcript analysis and summary prompts
#
# Organized with XML tags for clear structure.
# =============================================================================

from agents.prompts.analysis_prompts import (
    ANALYST_SYSTEM_PROMPT,
    build_analysis_prompt,
    build_summary_prompt,
)

__all__ = [
    "ANALYST_SYSTEM_PROMPT",
    "build_analysis_prompt",
    "build_summary_prompt",
]
