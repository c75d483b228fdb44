"""
Centralized configuration for LLM Prompts.
"""


class SummaryPrompts:
    """Prompts for the video summary generator."""

    SYSTEM_INSTRUCTIONS = """You're a professional content summarizer specializing in YouTube videos.
Summarize transcripts in a clear, concise, and engaging way.
Always answer in the exact format requested, with no extra sections."""

    # Parsed by recap.services.summarization.parse_summary_response;
    # keep the KEY POINTS / SUMMARY markers in sync with it.
    VIDEO_TRANSCRIPT = """Video Title: "{title}"

Transcript:
{content}

Please provide:
1. A list of 3-5 key points from the video (the most important takeaways)
2. A concise but comprehensive summary paragraph (250-350 words) that captures the main ideas

Format your response exactly as follows:
KEY POINTS:
- Point 1
- Point 2
- Point 3

SUMMARY:
Your paragraph summary here..."""
