"""Value types shared by the pipeline stages and the stores."""

from dataclasses import dataclass

ASSISTANT_SENDER_ID = "assistant"
ASSISTANT_ROLES = frozenset({"bot", "assistant"})
DEFAULT_LANGUAGE = "en"


@dataclass(frozen=True)
class MessageEvent:
    """A newly created chat message, as delivered to the pipeline.

    Attributes:
        chat_id: Chat the message belongs to
        message_id: Message identifier within the chat
        sender_id: Author user id
        receiver_id: Recipient user id
        original_text: Text to enrich (may be empty)
        sender_role: Author role tag; bot-authored messages are never processed
    """

    chat_id: str
    message_id: str
    sender_id: str
    receiver_id: str
    original_text: str = ""
    sender_role: str | None = None

    @property
    def is_assistant_authored(self) -> bool:
        """Whether the automated assistant wrote this message."""
        return (self.sender_role or "").strip().lower() in ASSISTANT_ROLES


@dataclass(frozen=True)
class UserRecord:
    """The slice of a user profile the pipeline reads.

    Attributes:
        id: User identifier
        language: Preferred language (settings.language, then language), if any
        device_token: Push token, if notifications are enabled for the user
    """

    id: str
    language: str | None = None
    device_token: str | None = None


@dataclass(frozen=True)
class PipelineConfigRecord:
    """Singleton pipeline configuration.

    default_provider is stored for administrators but provider selection
    still uses the first enabled record.
    """

    default_provider: str | None = None
