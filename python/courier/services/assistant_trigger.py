"""Decides whether an inbound message warrants an automated assistant reply.

A message triggers the assistant when, case-insensitively, it mentions
"assistant" or "help", or when it ends with a question mark.
"""

TRIGGER_KEYWORDS = ("assistant", "help")


def should_respond(text: str | None) -> bool:
    """Return True if the assistant should reply to text."""
    if not text:
        return False
    lowered = text.lower()
    if any(keyword in lowered for keyword in TRIGGER_KEYWORDS):
        return True
    return lowered.strip().endswith("?")
