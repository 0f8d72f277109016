"""
Text rendering for retrieved memories.

Everything here is a pure function. ``render_memory_context`` produces the
block injected ahead of an agent turn; the ``format_*`` helpers produce the
replies of the tool surface.
"""

import math
import re
from typing import Iterable, Optional, Sequence

from mama_gateway.types import Checkpoint, MemoryRecord, Outcome, Timestamp, parse_timestamp

MEMORY_CONTEXT_OPEN = "<relevant-memories>"
MEMORY_CONTEXT_CLOSE = "</relevant-memories>"
MEMORY_CONTEXT_TITLE = "# MAMA Memory Context"

LINK_GLYPH = "\U0001f517"
ELLIPSIS = "..."

COMPACTION_NOTE = "**Note:** Context was recently compressed. Above memories help restore state."

# builds_on / debates take one bare id; synthesizes takes a bracketed list.
# Neither alternative may run past the id or the closing bracket.
_LINK_PATTERN = re.compile(
    r"(?:builds_on|debates):\s*[\w-]+|synthesizes:\s*\[[^\]]+\]",
    re.IGNORECASE,
)


def truncate_text(text: str, max_len: int) -> str:
    """Cut ``text`` to ``max_len`` characters plus an ellipsis."""
    if len(text) <= max_len:
        return text
    return text[:max_len] + ELLIPSIS


def extract_link(reasoning: str) -> Optional[str]:
    """Return the first relationship annotation in ``reasoning``, if any."""
    if not reasoning:
        return None
    match = _LINK_PATTERN.search(reasoning)
    return match.group(0) if match else None


def format_reasoning(reasoning: str, max_len: int = 80) -> str:
    """Truncate reasoning, keeping any link annotation visible.

    The annotation is looked up in the full text, independently of the
    truncation, and appended on its own line unless the truncated text
    already contains it whole.
    """
    if not reasoning:
        return ""

    link = extract_link(reasoning)
    truncated = truncate_text(reasoning, max_len)

    if link and link not in truncated:
        return f"{truncated}\n  {LINK_GLYPH} {link}"
    return truncated


def format_timestamp(value: Timestamp) -> str:
    """Render a timestamp as UTC ISO-8601 with millisecond precision."""
    parsed = parse_timestamp(value)
    if parsed is None:
        return str(value)
    return parsed.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def similarity_percent(record: MemoryRecord) -> int:
    """Similarity as a whole percentage, halves rounded up."""
    return math.floor((record.similarity or 0) * 100 + 0.5)


def render_memory_context(
    semantic: Sequence[MemoryRecord],
    checkpoint: Optional[Checkpoint],
    recent: Sequence[MemoryRecord],
    compaction_note: Optional[str] = None,
) -> str:
    """Compose the auto-recall block.

    Sections, in order: semantic matches, last checkpoint, recent decisions
    (only when there are no semantic matches), compaction note. The whole
    block is wrapped in one ``<relevant-memories>`` pair.
    """
    lines = [MEMORY_CONTEXT_OPEN, MEMORY_CONTEXT_TITLE, ""]

    if semantic:
        lines += ["## Relevant Decisions (semantic match)", ""]
        for record in semantic:
            entry = f"- **{record.topic}** [{similarity_percent(record)}%]: {record.decision}"
            if record.outcome:
                entry += f" ({record.outcome})"
            lines.append(entry)
            lines.append(f"  _{format_reasoning(record.reasoning, 100)}_")
            lines.append(f"  ID: `{record.id}`")
        lines.append("")

    if checkpoint is not None:
        lines += [f"## Last Checkpoint ({format_timestamp(checkpoint.timestamp)})", ""]
        lines += [f"**Summary:** {checkpoint.summary}", ""]
        if checkpoint.next_steps:
            lines += [f"**Next Steps:** {checkpoint.next_steps}", ""]

    if recent and not semantic:
        lines += ["## Recent Decisions", ""]
        for record in recent:
            entry = f"- **{record.topic}**: {record.decision}"
            if record.outcome:
                entry += f" ({record.outcome})"
            lines.append(entry)
        lines.append("")

    if compaction_note:
        lines += ["", compaction_note]

    lines.append(MEMORY_CONTEXT_CLOSE)
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Tool replies
# ---------------------------------------------------------------------------


def format_search_results(query: str, results: Sequence[MemoryRecord]) -> str:
    if not results:
        return f'No decisions found for "{query}". This may be a new topic.'

    lines = [f"Found {len(results)} related decisions:", ""]
    for idx, record in enumerate(results, 1):
        lines.append(f"**{idx}. {record.topic}** [{similarity_percent(record)}% match]")
        lines.append(f"   Decision: {record.decision}")
        lines.append(f"   Reasoning: {format_reasoning(record.reasoning, 150)}")
        lines.append(f"   ID: `{record.id}` | Outcome: {record.outcome or Outcome.PENDING.value}")
        lines.append("")
    return "\n".join(lines)


def format_checkpoint(checkpoint: Optional[Checkpoint], recent: Iterable[MemoryRecord]) -> str:
    recent = list(recent)

    if checkpoint is None:
        text = "No checkpoint found - fresh start."
        if recent:
            text += "\n\nRecent decisions:\n"
            text += "".join(f"- {r.topic}: {r.decision}\n" for r in recent)
        return text

    text = f"**Checkpoint** ({format_timestamp(checkpoint.timestamp)})\n\n"
    text += f"**Summary:**\n{checkpoint.summary}\n\n"
    if checkpoint.next_steps:
        text += f"**Next Steps:**\n{checkpoint.next_steps}\n\n"
    if recent:
        text += "**Recent Decisions:**\n"
        text += "".join(
            f"- **{r.topic}**: {r.decision} ({r.outcome or Outcome.PENDING.value})\n"
            for r in recent
        )
    return text
