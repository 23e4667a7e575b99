# =============================================================================
# agents/prompts/analysis_prompts.py - Transcript Analysis Prompts
# =============================================================================
# Prompts for the Transcript Analyst:
# - build_analysis_prompt: JSON analysis (comprehensive or meeting structure)
# - build_summary_prompt: free-text summary (executive, detailed, bullets)
#
# Transcript facts (duration, speakers, chapters, entities) are inlined so
# the model works from what the speech API actually detected.
#
# Usage:
#   prompt = build_analysis_prompt(transcript_data, "meeting")
#   prompt = build_summary_prompt(transcript_data, "executive")
# =============================================================================

from __future__ import annotations

from typing import Any

# =============================================================================
# System Prompt
# =============================================================================

ANALYST_SYSTEM_PROMPT = """
<role>
You are an expert audio analysis AI. You read transcripts of recorded
conversations, meetings, interviews and presentations and turn them into
structured, actionable insights.
</role>

<rules>
- Use only facts present in the transcript data you are given
- If information is not available, use null or empty arrays
- Be concise but informative
- Focus on actionable insights
</rules>
""".strip()


# =============================================================================
# Output Structures
# =============================================================================

COMPREHENSIVE_STRUCTURE = """
{{
  "summary": {{
    "overview": "Brief overview of the audio content",
    "key_points": ["Point 1", "Point 2", "Point 3"],
    "main_topics": ["Topic 1", "Topic 2"],
    "audio_type": "meeting|interview|presentation|conversation|other"
  }},
  "speaker_analysis": {{
    "dominant_speaker": "Speaker ID who spoke the most",
    "speaking_distribution": [
      {{
        "speaker_id": "A",
        "percentage": 60,
        "talk_time_seconds": 120,
        "engagement_level": "high|medium|low"
      }}
    ],
    "interaction_style": "collaborative|competitive|formal|casual"
  }},
  "content_insights": {{
    "sentiment_overview": "positive|negative|neutral|mixed",
    "emotional_tone": "professional|casual|tense|friendly",
    "key_decisions": ["Decision 1", "Decision 2"],
    "action_items": [
      {{
        "task": "Task description",
        "assignee": "Person responsible (if mentioned)",
        "priority": "high|medium|low",
        "due_date": "deadline if mentioned"
      }}
    ],
    "questions_raised": ["Question 1", "Question 2"]
  }},
  "topics_and_themes": {{
    "primary_themes": ["Theme 1", "Theme 2"],
    "technical_terms": ["Term 1", "Term 2"],
    "mentioned_entities": {{
      "people": ["Name 1"],
      "organizations": ["Org 1"],
      "locations": ["Location 1"],
      "dates": ["Date 1"]
    }}
  }},
  "quality_metrics": {{
    "audio_clarity": "excellent|good|fair|poor",
    "transcription_confidence": {confidence},
    "speaker_separation_quality": "clear|moderate|difficult",
    "background_noise": "minimal|moderate|significant"
  }},
  "recommendations": {{
    "follow_up_actions": ["Action 1", "Action 2"],
    "improvement_suggestions": ["Suggestion 1", "Suggestion 2"],
    "next_steps": ["Step 1", "Step 2"]
  }}
}}
"""

MEETING_STRUCTURE = """
{{
  "meeting_summary": {{
    "meeting_type": "standup|review|planning|interview|other",
    "duration_minutes": {duration_minutes},
    "attendee_count": {speaker_count},
    "key_outcomes": ["Outcome 1", "Outcome 2"]
  }},
  "agenda_analysis": {{
    "topics_covered": ["Topic 1", "Topic 2"],
    "time_allocation": [
      {{
        "topic": "Topic 1",
        "duration_seconds": 120,
        "speakers_involved": ["A", "B"]
      }}
    ]
  }},
  "action_items": [
    {{
      "task": "Task description",
      "assignee": "Speaker A",
      "due_date": "mentioned deadline or null",
      "priority": "high|medium|low"
    }}
  ],
  "decisions_made": [
    {{
      "decision": "Decision description",
      "rationale": "Reasoning provided",
      "stakeholders": ["Speaker A", "Speaker B"]
    }}
  ]
}}
"""

SUMMARY_INSTRUCTIONS = {
    "executive": """Create a concise executive summary (2-3 paragraphs) highlighting:
- Main purpose and outcomes
- Key decisions or conclusions
- Important action items
Keep it professional and actionable.""",

    "detailed": """Create a detailed summary including:
- Complete overview of discussion
- Speaker contributions and perspectives
- All decisions and action items
- Timeline of topics covered
- Next steps and follow-ups""",

    "bullet_points": """Create a bullet-point summary with:
- Main topics discussed
- Key decisions made
- Action items assigned
- Important quotes or insights
- Next meeting/follow-up plans""",
}


# =============================================================================
# Builders
# =============================================================================

def _duration_minutes(transcript_data: dict[str, Any]) -> int:
    return round((transcript_data.get("audio_duration") or 0) / 60)


def _speaker_lines(speakers: list[dict[str, Any]]) -> str:
    if not speakers:
        return "No speaker data available"
    return "\n".join(
        f"Speaker {s.get('speaker_id')}: {s.get('word_count', 0)} words, "
        f"{round((s.get('total_time') or 0) / 1000)} seconds"
        for s in speakers
    )


def _chapter_lines(chapters: list[dict[str, Any]]) -> str:
    if not chapters:
        return "No chapters detected"
    return "\n".join(
        f"\"{c.get('headline', '')}\" "
        f"({round((c.get('start') or 0) / 1000)}s - {round((c.get('end') or 0) / 1000)}s)"
        for c in chapters
    )


def _entity_lines(entities: list[dict[str, Any]]) -> str:
    if not entities:
        return "No entities detected"
    return "\n".join(f"{e.get('entity_type')}: \"{e.get('text')}\"" for e in entities)


def build_analysis_prompt(
    transcript_data: dict[str, Any],
    analysis_type: str = "comprehensive",
) -> str:
    """
    Build the user prompt asking for a JSON analysis.

    Args:
        transcript_data: Normalized transcript from TranscriptionService
        analysis_type: "comprehensive" or "meeting" (anything else falls
            back to comprehensive)

    Returns:
        Prompt text ending with the expected JSON structure
    """
    speakers = transcript_data.get("speakers") or []

    base = f"""Analyze the following transcript and provide insights in JSON format.

TRANSCRIPT DATA:
- Text: "{transcript_data.get('text', '')}"
- Duration: {transcript_data.get('audio_duration')} seconds
- Confidence: {transcript_data.get('confidence')}
- Language: {transcript_data.get('language_code')}
- Speakers: {len(speakers)}

SPEAKER INFORMATION:
{_speaker_lines(speakers)}

CHAPTERS:
{_chapter_lines(transcript_data.get('chapters') or [])}

ENTITIES DETECTED:
{_entity_lines(transcript_data.get('entities') or [])}

Please provide the analysis in the following JSON structure:
"""

    if analysis_type == "meeting":
        structure = MEETING_STRUCTURE.format(
            duration_minutes=_duration_minutes(transcript_data),
            speaker_count=len(speakers),
        )
    else:
        structure = COMPREHENSIVE_STRUCTURE.format(
            confidence=transcript_data.get("confidence") or 0,
        )

    return base + structure + """
IMPORTANT:
- Return ONLY valid JSON, no additional text or formatting
- Use actual data from the transcript to populate fields"""


def build_summary_prompt(
    transcript_data: dict[str, Any],
    summary_type: str = "executive",
) -> str:
    """
    Build the prompt for a free-text summary.

    Unknown summary types fall back to "executive".
    """
    context = f"""TRANSCRIPT: "{transcript_data.get('text', '')}"
DURATION: {_duration_minutes(transcript_data)} minutes
SPEAKERS: {len(transcript_data.get('speakers') or [])}
"""
    instructions = SUMMARY_INSTRUCTIONS.get(summary_type, SUMMARY_INSTRUCTIONS["executive"])
    return f"{context}\n{instructions}"
