"""Extract and normalize message text from raw log payloads."""

import re

# Markers of synthetic user-role text injected by the client
SYNTHETIC_MARKERS = (
    "<command-",
    "<system-reminder>",
    "<user-prompt-submit-hook>",
)

TRIGGER_TEXT_LIMIT = 100

_WHITESPACE_RE = re.compile(r'\s+')


def payload_content(payload):
    """Return the content part of a payload.

    A payload is either a bare string or a message object with a
    ``content`` field (string or list of blocks).
    """
    if isinstance(payload, dict):
        return payload.get("content")
    return payload


def plain_text(payload) -> str | None:
    """Return the payload's text when it is plain text, else None."""
    content = payload_content(payload)
    if isinstance(content, str):
        return content
    return None


def has_synthetic_marker(text: str) -> bool:
    return any(marker in text for marker in SYNTHETIC_MARKERS)


def has_tool_result(payload) -> bool:
    """True when the payload carries a tool-result block or correlation id."""
    content = payload_content(payload)
    if not isinstance(content, list):
        return False
    for block in content:
        if isinstance(block, dict) and (
            block.get("tool_use_id") or block.get("type") == "tool_result"
        ):
            return True
    return False


def extract_message_text(payload) -> str:
    """Extract the user-typed text from a payload, normalized.

    Text blocks with a tool correlation id are tool plumbing and are left out.
    Returns "" when nothing can be extracted.
    """
    content = payload_content(payload)
    if isinstance(content, str):
        return normalize_text(content)
    if isinstance(content, list):
        texts = []
        for block in content:
            if isinstance(block, str):
                texts.append(block)
            elif (
                isinstance(block, dict)
                and block.get("type") == "text"
                and not block.get("tool_use_id")
                and isinstance(block.get("text"), str)
            ):
                texts.append(block["text"])
        text = normalize_text(" ".join(texts))
        if text:
            return text
    if isinstance(payload, dict) and isinstance(payload.get("text"), str):
        return normalize_text(payload["text"])
    return ""


def normalize_text(text: str) -> str:
    """Collapse runs of whitespace and strip."""
    return _WHITESPACE_RE.sub(" ", text).strip()


def truncate_for_display(text: str, limit: int = TRIGGER_TEXT_LIMIT) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


def count_tool_uses(payload) -> int:
    """Count tool_use blocks in an assistant payload."""
    content = payload_content(payload)
    if not isinstance(content, list):
        return 0
    return sum(
        1 for block in content
        if isinstance(block, dict) and block.get("type") == "tool_use"
    )
