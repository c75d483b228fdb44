"""
Legacy flattened summary text.

Older clients save a summary as one blob::

    <title>

    Key Points:
    - point one
    - point two

    <paragraph>

Summaries are stored as structured fields; this parser only exists to accept
the flattened form on save. A title cannot contain a newline, and a key point
continued on a new line starting with "- " is read as two points.
"""
import re
from typing import List

from recap.core.constants import SummaryConfig
from recap.models import SummaryContent

_HEADER_RE = re.compile(r"^\s*key\s+points\s*:\s*$", re.IGNORECASE)
_BULLET_RE = re.compile(r"^\s*[-*•]\s?")


def parse_flattened_summary(text: str) -> SummaryContent:
    """
    Parse legacy flattened text into structured content.

    The first non-empty line is the title. Bulleted lines after the
    ``Key Points:`` header are key points; everything after the bullet block
    is the full summary. Text without a header has no key points.
    """
    lines = text.strip().splitlines()
    if not lines:
        return SummaryContent(title=SummaryConfig.DEFAULT_TITLE, key_points=[], full_summary="")

    title = lines[0].strip() or SummaryConfig.DEFAULT_TITLE
    rest = lines[1:]

    header_index = next((i for i, line in enumerate(rest) if _HEADER_RE.match(line)), None)
    if header_index is None:
        return SummaryContent(title=title, key_points=[], full_summary="\n".join(rest).strip())

    key_points: List[str] = []
    body_start = len(rest)
    for i in range(header_index + 1, len(rest)):
        line = rest[i]
        if _BULLET_RE.match(line) and line.strip() not in ("-", "*", "•"):
            key_points.append(_BULLET_RE.sub("", line, count=1).strip())
        elif not line.strip() and not key_points:
            continue
        else:
            body_start = i
            break

    preamble = "\n".join(rest[:header_index]).strip()
    body = "\n".join(rest[body_start:]).strip()
    full_summary = "\n\n".join(part for part in (preamble, body) if part)
    return SummaryContent(title=title, key_points=key_points, full_summary=full_summary)
