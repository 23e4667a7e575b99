# =============================================================================
# tests/test_analyst.py - Analyst Agent Tests
# =============================================================================
# This module contains tests for:
# - Prompt building (analysis structures, summary styles)
# - AnalystAgent JSON parsing (fences, invalid JSON, non-objects)
# - Summary generation
# - OpenAI error handling
#
# Tests use mocked OpenAI responses to avoid API costs.
# =============================================================================

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest

from agents.analyst import AnalysisError, AnalystAgent
from agents.prompts.analysis_prompts import (
    ANALYST_SYSTEM_PROMPT,
    build_analysis_prompt,
    build_summary_prompt,
)


def mock_openai(content: str) -> MagicMock:
    """OpenAI client whose chat completion returns `content`."""
    client = MagicMock()
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    client.chat.completions.create.return_value = response
    return client


# =============================================================================
# Prompt Tests
# =============================================================================

class TestAnalysisPrompt:
    def test_includes_transcript_facts(self, transcript_data):
        prompt = build_analysis_prompt(transcript_data, "comprehensive")

        assert transcript_data["text"] in prompt
        assert "Duration: 125.4 seconds" in prompt
        assert "Speakers: 2" in prompt
        assert "Speaker A: 7 words, 3 seconds" in prompt
        assert '"Launch plan review" (0s - 6s)' in prompt
        assert 'event: "launch"' in prompt

    def test_comprehensive_structure(self, transcript_data):
        prompt = build_analysis_prompt(transcript_data, "comprehensive")

        assert '"content_insights"' in prompt
        assert '"transcription_confidence": 0.93' in prompt
        assert '"meeting_summary"' not in prompt

    def test_meeting_structure(self, transcript_data):
        prompt = build_analysis_prompt(transcript_data, "meeting")

        assert '"meeting_summary"' in prompt
        assert '"duration_minutes": 2' in prompt
        assert '"attendee_count": 2' in prompt
        assert '"content_insights"' not in prompt

    def test_unknown_type_falls_back_to_comprehensive(self, transcript_data):
        assert '"content_insights"' in build_analysis_prompt(transcript_data, "sentiment")

    def test_empty_transcript_placeholders(self):
        prompt = build_analysis_prompt({"text": "hi"})

        assert "No speaker data available" in prompt
        assert "No chapters detected" in prompt
        assert "No entities detected" in prompt


class TestSummaryPrompt:
    @pytest.mark.parametrize("summary_type,marker", [
        ("executive", "executive summary"),
        ("detailed", "detailed summary"),
        ("bullet_points", "bullet-point summary"),
    ])
    def test_styles(self, transcript_data, summary_type, marker):
        prompt = build_summary_prompt(transcript_data, summary_type)

        assert marker in prompt
        assert "DURATION: 2 minutes" in prompt
        assert "SPEAKERS: 2" in prompt

    def test_unknown_style_uses_executive(self, transcript_data):
        assert "executive summary" in build_summary_prompt(transcript_data, "haiku")


# =============================================================================
# Analysis Tests
# =============================================================================

class TestAnalyzeTranscript:
    def test_returns_parsed_json(self, transcript_data, comprehensive_analysis):
        client = mock_openai(json.dumps(comprehensive_analysis))
        agent = AnalystAgent(client=client)

        result = agent.analyze_transcript(transcript_data, "comprehensive")

        assert result == comprehensive_analysis

    def test_requests_json_mode(self, transcript_data):
        client = mock_openai("{}")
        AnalystAgent(model="gpt-4o-mini", temperature=0.1, client=client).analyze_transcript(transcript_data)

        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["temperature"] == 0.1
        assert kwargs["messages"][0] == {"role": "system", "content": ANALYST_SYSTEM_PROMPT}

    def test_strips_code_fences(self, transcript_data):
        client = mock_openai('```json\n{"summary": {"overview": "ok"}}\n```')

        result = AnalystAgent(client=client).analyze_transcript(transcript_data)

        assert result == {"summary": {"overview": "ok"}}

    def test_invalid_json(self, transcript_data):
        client = mock_openai("Here is your analysis: great meeting!")

        with pytest.raises(AnalysisError) as exc_info:
            AnalystAgent(client=client).analyze_transcript(transcript_data)

        assert exc_info.value.code == "JSON_PARSE_ERROR"
        assert "great meeting" in exc_info.value.details["raw_response"]

    def test_non_object_json(self, transcript_data):
        client = mock_openai('["a", "b"]')

        with pytest.raises(AnalysisError) as exc_info:
            AnalystAgent(client=client).analyze_transcript(transcript_data)

        assert exc_info.value.code == "JSON_SHAPE_ERROR"

    def test_openai_failure(self, transcript_data):
        client = MagicMock()
        client.chat.completions.create.side_effect = RuntimeError("rate limited")

        with pytest.raises(AnalysisError) as exc_info:
            AnalystAgent(client=client).analyze_transcript(transcript_data)

        assert exc_info.value.code == "OPENAI_ERROR"
        assert "rate limited" in exc_info.value.message


# =============================================================================
# Summary Tests
# =============================================================================

class TestGenerateSummary:
    def test_summary_shape(self, transcript_data):
        client = mock_openai("  The team reviewed the launch plan.  \n")

        summary = AnalystAgent(client=client).generate_summary(transcript_data, "detailed")

        assert summary["type"] == "detailed"
        assert summary["content"] == "The team reviewed the launch plan."
        assert summary["generated_at"]

    def test_summary_is_free_text(self, transcript_data):
        client = mock_openai("text")
        AnalystAgent(client=client).generate_summary(transcript_data)

        assert "response_format" not in client.chat.completions.create.call_args.kwargs
