"""Incoming Facebook Messenger webhook models."""

from enum import Enum
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EventKind(str, Enum):
    """Classification tag of a single messaging event."""

    MESSAGE = "message"
    POSTBACK = "postback"
    DELIVERY = "delivery"
    READ = "read"
    ACCOUNT_LINK = "account_linking"
    OPTIN = "optin"
    UNKNOWN = "unknown"


class MessengerEntry(BaseModel):
    """Facebook webhook entry (one per Page)."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    id: str | None = None
    time: int | None = None
    messaging: list[Any] = Field(default_factory=list)


class MessengerWebhookPayload(BaseModel):
    """Facebook webhook payload."""

    model_config = ConfigDict(extra="ignore")

    object: str
    entry: list[Any] = Field(default_factory=list)


class QuickReplyIn(BaseModel):
    """Payload echoed back when a quick reply is tapped."""

    payload: str


class MessageEvent(BaseModel):
    """Message sent to the Page, or echoed back from it."""

    model_config = ConfigDict(extra="ignore")

    kind: Literal[EventKind.MESSAGE] = EventKind.MESSAGE
    is_echo: bool = False
    mid: str = ""
    text: str | None = None
    attachments: list[dict[str, Any]] | None = None
    quick_reply: QuickReplyIn | None = None


class PostbackEvent(BaseModel):
    """Postback button or Get Started tap."""

    model_config = ConfigDict(extra="ignore")

    kind: Literal[EventKind.POSTBACK] = EventKind.POSTBACK
    payload: str
    title: str | None = None


class DeliveryEvent(BaseModel):
    """Delivery confirmation up to `watermark`."""

    model_config = ConfigDict(extra="ignore")

    kind: Literal[EventKind.DELIVERY] = EventKind.DELIVERY
    mids: list[str] = Field(default_factory=list)
    watermark: int

    @field_validator("mids", mode="before")
    @classmethod
    def _null_mids(cls, value: Any) -> Any:
        # Facebook sends "mids": null when no message ids are attached
        return [] if value is None else value


class ReadEvent(BaseModel):
    """Read confirmation up to `watermark`."""

    model_config = ConfigDict(extra="ignore")

    kind: Literal[EventKind.READ] = EventKind.READ
    watermark: int


class AccountLinkEvent(BaseModel):
    """Account linking or unlinking notification."""

    model_config = ConfigDict(extra="ignore")

    kind: Literal[EventKind.ACCOUNT_LINK] = EventKind.ACCOUNT_LINK
    status: str
    authorization_code: str | None = None


class OptinEvent(BaseModel):
    """Send-to-Messenger / authentication opt-in."""

    model_config = ConfigDict(extra="ignore")

    kind: Literal[EventKind.OPTIN] = EventKind.OPTIN
    ref: str | None = None


class UnknownEvent(BaseModel):
    """Event shape the bot is not prepared to handle."""

    kind: Literal[EventKind.UNKNOWN] = EventKind.UNKNOWN
    fields: list[str] = Field(default_factory=list)


MessagingEvent = Union[
    MessageEvent,
    PostbackEvent,
    DeliveryEvent,
    ReadEvent,
    AccountLinkEvent,
    OptinEvent,
    UnknownEvent,
]


class ClassifiedEvent(BaseModel):
    """A messaging event tagged with its kind and routing fields."""

    model_config = ConfigDict(frozen=True)

    page_id: str | None = None
    page_time: int | None = None
    sender_id: str | None = None
    recipient_id: str | None = None
    timestamp: int | None = None
    event: MessagingEvent = Field(discriminator="kind")

    @property
    def kind(self) -> EventKind:
        return self.event.kind
