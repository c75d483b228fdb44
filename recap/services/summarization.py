"""
Summary generation for a single video transcript.

The model is asked for two labeled sections, ``KEY POINTS:`` (a bulleted
list) and ``SUMMARY:`` (a paragraph), and the free-text answer is parsed back
into a SummaryContent. Provider failures never escape as exceptions: they
come back as a failed SummaryOutcome.
"""
import asyncio
import re
from typing import List, Optional

from loguru import logger
from pydantic import BaseModel, ConfigDict
from tenacity import retry, stop_after_attempt, wait_exponential

from recap.core.constants import SummaryConfig
from recap.core.exceptions import BadRequestError
from recap.core.prompts import SummaryPrompts
from recap.core.providers.llm_provider import LLMProvider, LLMMessage
from recap.models import SummaryContent, LLMRole

_SECTION_RE = re.compile(r"^[\s#*]*(KEY\s+POINTS|SUMMARY)[\s*]*:[\s*]*(.*)$", re.IGNORECASE)
_BULLET_RE = re.compile(r"^\s*(?:[-*•]|\d+[.)])\s+")


class VideoContext(BaseModel):
    """What we know about the video besides its transcript."""

    title: Optional[str] = None
    video_id: Optional[str] = None
    url: Optional[str] = None


class SummaryOutcome(BaseModel):
    """Tagged result of a generation: ``value`` when ``ok``, ``error`` otherwise."""

    ok: bool
    value: Optional[SummaryContent] = None
    error: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def success(cls, value: SummaryContent) -> "SummaryOutcome":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: str) -> "SummaryOutcome":
        return cls(ok=False, error=error)


def _split_key_points(lines: List[str]) -> List[str]:
    points: List[str] = []
    for line in lines:
        if not line.strip():
            continue
        if _BULLET_RE.match(line):
            point = _BULLET_RE.sub("", line, count=1).strip()
            if point:
                points.append(point)
        elif points:
            # Wrapped line of the previous bullet
            points[-1] = f"{points[-1]} {line.strip()}"
        else:
            points.append(line.strip())
    return points


def parse_summary_response(text: str, title: str) -> SummaryContent:
    """
    Parse the model's answer into structured content.

    Args:
        text: Raw model output.
        title: Title to attach to the result.

    Returns:
        SummaryContent. Without a SUMMARY section the whole answer becomes the
        full summary; without a KEY POINTS section the key points are empty.
    """
    sections: dict[str, List[str]] = {}
    current: Optional[str] = None

    for line in text.splitlines():
        match = _SECTION_RE.match(line)
        if match:
            current = "summary" if match.group(1).upper() == "SUMMARY" else "key_points"
            sections.setdefault(current, [])
            remainder = match.group(2).strip()
            if remainder:
                sections[current].append(remainder)
            continue
        if current is not None:
            sections[current].append(line)

    key_points = _split_key_points(sections.get("key_points", []))

    if "summary" in sections:
        full_summary = "\n".join(sections["summary"]).strip()
    else:
        full_summary = text.strip()

    return SummaryContent(title=title, key_points=key_points, full_summary=full_summary)


class SummarizationService:
    """
    Generates structured summaries of video transcripts with an LLM.

    Attributes:
        llm_provider: Provider used for the completion.
        timeout_seconds: Upper bound for one LLM call.
    """

    def __init__(
        self,
        llm_provider: LLMProvider,
        timeout_seconds: float = 60.0,
    ):
        self.llm_provider = llm_provider
        self.timeout_seconds = timeout_seconds

    def build_messages(self, content: str, title: str) -> List[LLMMessage]:
        return [
            LLMMessage(role=LLMRole.SYSTEM, content=SummaryPrompts.SYSTEM_INSTRUCTIONS),
            LLMMessage(
                role=LLMRole.USER,
                content=SummaryPrompts.VIDEO_TRANSCRIPT.format(title=title, content=content.strip()),
            ),
        ]

    async def generate(self, content: str, context: VideoContext) -> SummaryOutcome:
        """
        Summarize a transcript.

        Args:
            content: The transcript text.
            context: Title, video id and URL of the video.

        Returns:
            SummaryOutcome with the parsed summary, or the failure reason.

        Raises:
            BadRequestError: If the transcript is empty or blank.
        """
        if not content or not content.strip():
            raise BadRequestError("Empty transcript provided")

        title = (context.title or "").strip() or SummaryConfig.DEFAULT_TITLE
        messages = self.build_messages(content, title)

        logger.info(
            f"Generating summary for '{title}' "
            f"(video={context.video_id or context.url}, {len(content)} chars)"
        )
        try:
            text = await self._complete(messages)
        except Exception as e:
            logger.error(f"Summary generation failed: {e!r}")
            return SummaryOutcome.failure(self._describe(e))

        if not text.strip():
            logger.error("LLM returned an empty response")
            return SummaryOutcome.failure("The model returned an empty response")

        summary = parse_summary_response(text, title)
        logger.info(f"Parsed summary with {len(summary.key_points)} key points")
        return SummaryOutcome.success(summary)

    @retry(
        stop=stop_after_attempt(SummaryConfig.MAX_ATTEMPTS),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
        reraise=True,
    )
    async def _complete(self, messages: List[LLMMessage]) -> str:
        response = await asyncio.wait_for(
            self.llm_provider.generate_text(
                messages=messages,
                temperature=SummaryConfig.TEMPERATURE,
            ),
            timeout=self.timeout_seconds,
        )
        return response.content

    def _describe(self, error: BaseException) -> str:
        if isinstance(error, asyncio.TimeoutError):
            return f"The model did not answer within {self.timeout_seconds:g}s"
        return f"The model call failed: {error}"
