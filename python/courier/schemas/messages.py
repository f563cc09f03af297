"""Chat message Pydantic schemas."""

from pydantic import BaseModel, Field, field_validator


class MessageCreate(BaseModel):
    """Request schema for posting a chat message.

    Creating a message is the event that starts the enrichment pipeline.
    """

    sender_id: str = Field(..., min_length=1)
    receiver_id: str = Field(..., min_length=1)
    text: str = Field(default="", description="Message text (may be empty)")
    sender_role: str | None = Field(default=None, description="user | bot")

    @field_validator("sender_id", "receiver_id")
    @classmethod
    def validate_ids(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class MessageOut(BaseModel):
    """Response schema for a created message."""

    chat_id: str
    message_id: str
    sender_id: str
    receiver_id: str
    sender_role: str | None = None
    dispatch: str  # worker | in_process
