"""
Heuristic detection of decision-like utterances.

Detection only surfaces candidates for the session-end review list.
Persisting a decision needs a topic, decision and reasoning, which
keyword matching cannot infer, so nothing detected here is saved.
"""

import re
from typing import Any, Iterable, List

from mama_gateway.render import MEMORY_CONTEXT_OPEN

MIN_CANDIDATE_CHARS = 20
MAX_CANDIDATE_CHARS = 500

# Korean variants sit next to their English counterparts.
DECISION_PATTERNS = [
    # decided / chose
    re.compile(r"decided|결정|선택|chose|use.*instead|going with", re.IGNORECASE),
    # intent
    re.compile(r"will use|사용할|approach|방식|strategy", re.IGNORECASE),
    # retrospective
    re.compile(r"remember|기억|learned|배웠|lesson", re.IGNORECASE),
]

CONVERSATION_ROLES = ("user", "assistant")


def _looks_injected(text: str) -> bool:
    if MEMORY_CONTEXT_OPEN in text:
        return True
    return text.startswith("<") and "</" in text


def is_decision_candidate(text: str) -> bool:
    """Return True if ``text`` reads like a decision worth reviewing."""
    if len(text) < MIN_CANDIDATE_CHARS or len(text) > MAX_CANDIDATE_CHARS:
        return False
    if _looks_injected(text):
        return False
    return any(p.search(text) for p in DECISION_PATTERNS)


def extract_message_texts(messages: Iterable[Any]) -> List[str]:
    """Collect text from user and assistant messages.

    Content can be a string or a list of content blocks; only ``text``
    blocks are used.
    """
    texts: List[str] = []
    for message in messages:
        if not isinstance(message, dict):
            continue
        if message.get("role") not in CONVERSATION_ROLES:
            continue

        content = message.get("content")
        if isinstance(content, str):
            texts.append(content)
        elif isinstance(content, list):
            for block in content:
                if (
                    isinstance(block, dict)
                    and block.get("type") == "text"
                    and isinstance(block.get("text"), str)
                ):
                    texts.append(block["text"])
    return texts


def find_decision_candidates(messages: Iterable[Any]) -> List[str]:
    """Texts from ``messages`` that pass ``is_decision_candidate``, in order."""
    return [text for text in extract_message_texts(messages) if is_decision_candidate(text)]
