# =============================================================================
# agents/analyst.py - Transcript Analyst Agent
# =============================================================================
# This module turns a transcript into:
# 1. A structured JSON analysis (summary, speakers, insights, action items)
# 2. A free-text summary (executive, detailed or bullet points)
#
# Direct OpenAI calls, no framework. JSON mode is requested for the
# analysis; code fences are still stripped because some models wrap
# their output anyway.
#
# Usage:
#   from agents.analyst import AnalystAgent
#   agent = AnalystAgent()
#   analysis = agent.analyze_transcript(transcript_data, "comprehensive")
#   summary = agent.generate_summary(transcript_data, "executive")
# =============================================================================

from __future__ import annotations

import json
import logging
import re
from typing import Any

from openai import OpenAI

from app.config import settings
from agents.prompts.analysis_prompts import (
    ANALYST_SYSTEM_PROMPT,
    build_analysis_prompt,
    build_summary_prompt,
)
from lib.utils import ApplicationError, utc_now_iso

logger = logging.getLogger(__name__)

_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*|\s*```$")


# =============================================================================
# Exceptions
# =============================================================================

class AnalysisError(ApplicationError):
    """Error during transcript analysis or summarization."""

    def __init__(
        self,
        message: str,
        code: str = "ANALYSIS_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code=code, suggestion=suggestion, details=details)


# =============================================================================
# Analyst Agent
# =============================================================================

class AnalystAgent:
    """
    LLM-backed transcript analyst.

    Attributes:
        model: OpenAI model to use (default from settings)
        temperature: Generation temperature
    """

    def __init__(
        self,
        model: str | None = None,
        temperature: float | None = None,
        client: OpenAI | None = None,
    ):
        self.client = client or OpenAI(api_key=settings.OPENAI_API_KEY)
        self.model = model or settings.OPENAI_MODEL
        self.temperature = temperature if temperature is not None else settings.ANALYSIS_TEMPERATURE

        logger.info(f"AnalystAgent initialized with model={self.model}, temp={self.temperature}")

    def _complete(self, prompt: str, json_mode: bool = False) -> str:
        """Send one system + user exchange and return the reply text."""
        kwargs: dict[str, Any] = {
            "model": self.model,
            "temperature": self.temperature,
            "messages": [
                {"role": "system", "content": ANALYST_SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = self.client.chat.completions.create(**kwargs)
        except Exception as e:
            raise AnalysisError(
                message=f"OpenAI API call failed: {e}",
                code="OPENAI_ERROR",
                suggestion="Check your OPENAI_API_KEY and network connection",
                details={"model": self.model},
            )

        text = response.choices[0].message.content or ""
        logger.debug(f"OpenAI response: {text[:200]}...")
        return text

    # -------------------------------------------------------------------------
    # Analysis
    # -------------------------------------------------------------------------

    def analyze_transcript(
        self,
        transcript_data: dict[str, Any],
        analysis_type: str = "comprehensive",
    ) -> dict[str, Any]:
        """
        Produce a structured analysis of a transcript.

        Args:
            transcript_data: Normalized transcript from TranscriptionService
            analysis_type: "comprehensive" or "meeting"

        Returns:
            Parsed analysis dict

        Raises:
            AnalysisError: If the call fails or the reply is not a JSON object
        """
        prompt = build_analysis_prompt(transcript_data, analysis_type)
        text = self._complete(prompt, json_mode=True)
        analysis = self._parse_json(text)
        logger.info(f"Analysis complete ({analysis_type}): {len(analysis)} top-level sections")
        return analysis

    @staticmethod
    def _parse_json(response_text: str) -> dict[str, Any]:
        """
        Parse the model's reply into a dict.

        Raises:
            AnalysisError: On invalid JSON or a non-object payload
        """
        cleaned = _FENCE_PATTERN.sub("", response_text.strip())

        try:
            data = json.loads(cleaned)
        except json.JSONDecodeError as e:
            raise AnalysisError(
                message=f"Invalid JSON response from model: {e}",
                code="JSON_PARSE_ERROR",
                suggestion="The model didn't return valid JSON. Retry processing the job.",
                details={"raw_response": response_text[:500]},
            )

        if not isinstance(data, dict):
            raise AnalysisError(
                message=f"Expected a JSON object, got {type(data).__name__}",
                code="JSON_SHAPE_ERROR",
                details={"raw_response": response_text[:500]},
            )
        return data

    # -------------------------------------------------------------------------
    # Summary
    # -------------------------------------------------------------------------

    def generate_summary(
        self,
        transcript_data: dict[str, Any],
        summary_type: str = "executive",
    ) -> dict[str, Any]:
        """
        Produce a free-text summary.

        Returns:
            {"type": summary_type, "content": text, "generated_at": iso timestamp}
        """
        prompt = build_summary_prompt(transcript_data, summary_type)
        content = self._complete(prompt)
        return {
            "type": summary_type,
            "content": content.strip(),
            "generated_at": utc_now_iso(),
        }
