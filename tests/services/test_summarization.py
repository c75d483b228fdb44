import asyncio

import pytest
from unittest.mock import AsyncMock
from recap.services.summarization import SummarizationService, VideoContext, parse_summary_response
from recap.models import LLMRole
from recap.core.exceptions import BadRequestError
from recap.core.providers.llm_provider import LLMProvider
from recap.core.prompts import SummaryPrompts

# Mock response object from LLM
class MockLLMResponse:
    def __init__(self, content):
        self.content = content

STRUCTURED_ANSWER = """KEY POINTS:
- First takeaway
- Second takeaway
- Third takeaway

SUMMARY:
A short paragraph about the video."""

@pytest.fixture
def mock_llm_provider():
    provider = AsyncMock(spec=LLMProvider)
    provider.generate_text.return_value = MockLLMResponse(STRUCTURED_ANSWER)
    return provider

@pytest.fixture
def summarization_service(mock_llm_provider):
    return SummarizationService(llm_provider=mock_llm_provider)

@pytest.fixture
def context():
    return VideoContext(title="Intro to X", video_id="dQw4w9WgXcQ", url="https://youtu.be/dQw4w9WgXcQ")

@pytest.mark.asyncio
async def test_generate_structured_summary(summarization_service, context):
    outcome = await summarization_service.generate("Today we learn X from scratch.", context)

    assert outcome.ok
    assert outcome.error is None
    assert outcome.value.title == "Intro to X"
    assert outcome.value.key_points == ["First takeaway", "Second takeaway", "Third takeaway"]
    assert outcome.value.full_summary == "A short paragraph about the video."

@pytest.mark.asyncio
async def test_prompt_contains_title_and_transcript(summarization_service, context):
    await summarization_service.generate("  Today we learn X from scratch.  ", context)

    args, kwargs = summarization_service.llm_provider.generate_text.call_args
    messages = kwargs['messages']

    assert len(messages) == 2
    assert messages[0].role == LLMRole.SYSTEM
    assert messages[0].content == SummaryPrompts.SYSTEM_INSTRUCTIONS
    assert messages[1].role == LLMRole.USER
    assert 'Video Title: "Intro to X"' in messages[1].content
    assert "Today we learn X from scratch." in messages[1].content
    assert "KEY POINTS:" in messages[1].content
    assert "SUMMARY:" in messages[1].content

@pytest.mark.asyncio
async def test_missing_title_uses_default(summarization_service):
    outcome = await summarization_service.generate("content", VideoContext(title="   "))

    assert outcome.value.title == "Video Summary"
    args, kwargs = summarization_service.llm_provider.generate_text.call_args
    assert 'Video Title: "Video Summary"' in kwargs['messages'][1].content

@pytest.mark.asyncio
@pytest.mark.parametrize("content", ["", "   \n\t "])
async def test_blank_transcript_is_rejected(summarization_service, context, content):
    with pytest.raises(BadRequestError):
        await summarization_service.generate(content, context)

    summarization_service.llm_provider.generate_text.assert_not_called()

@pytest.mark.asyncio
async def test_provider_error_becomes_failed_outcome(summarization_service, context):
    summarization_service.llm_provider.generate_text.side_effect = RuntimeError("quota exceeded")

    outcome = await summarization_service.generate("content", context)

    assert not outcome.ok
    assert outcome.value is None
    assert "quota exceeded" in outcome.error
    # Retried once before giving up
    assert summarization_service.llm_provider.generate_text.call_count == 2

@pytest.mark.asyncio
async def test_transient_error_is_retried(summarization_service, context):
    summarization_service.llm_provider.generate_text.side_effect = [
        RuntimeError("temporary"),
        MockLLMResponse(STRUCTURED_ANSWER),
    ]

    outcome = await summarization_service.generate("content", context)

    assert outcome.ok
    assert len(outcome.value.key_points) == 3

@pytest.mark.asyncio
async def test_timeout_becomes_failed_outcome(mock_llm_provider, context):
    async def never_answers(*args, **kwargs):
        await asyncio.sleep(5)

    mock_llm_provider.generate_text.side_effect = never_answers
    service = SummarizationService(llm_provider=mock_llm_provider, timeout_seconds=0.05)

    outcome = await service.generate("content", context)

    assert not outcome.ok
    assert "did not answer" in outcome.error

@pytest.mark.asyncio
async def test_empty_response_is_failure(summarization_service, context):
    summarization_service.llm_provider.generate_text.return_value = MockLLMResponse("   ")

    outcome = await summarization_service.generate("content", context)

    assert not outcome.ok
    assert "empty" in outcome.error

def test_parse_without_summary_section_uses_whole_text():
    text = "Just a paragraph with no markers at all."

    summary = parse_summary_response(text, "T")

    assert summary.key_points == []
    assert summary.full_summary == text

def test_parse_tolerates_markdown_headers_and_numbered_points():
    text = """## **Key Points:**
1. Alpha
2) Beta
   continues here
* Gamma

**SUMMARY:** Inline summary start.
Second line."""

    summary = parse_summary_response(text, "T")

    assert summary.key_points == ["Alpha", "Beta continues here", "Gamma"]
    assert summary.full_summary == "Inline summary start.\nSecond line."

def test_parse_summary_before_key_points():
    text = """SUMMARY:
Paragraph first.

KEY POINTS:
- One
- Two"""

    summary = parse_summary_response(text, "T")

    assert summary.full_summary == "Paragraph first."
    assert summary.key_points == ["One", "Two"]
