"""Outgoing reply models.

A reply is a semantic description of what the bot says next. Each variant
maps to exactly one Send API message shape, so a reply can never carry both
text and an attachment.
"""

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from src.constants import (
    MAX_CARD_BUTTONS,
    MAX_CAROUSEL_CARDS,
    MAX_QUICK_REPLIES,
    MIN_CAROUSEL_CARDS,
)


class MediaType(str, Enum):
    """Attachment types accepted by the Send API."""

    IMAGE = "image"
    AUDIO = "audio"
    VIDEO = "video"
    FILE = "file"


class SenderActionType(str, Enum):
    """Sender actions accepted by the Send API."""

    TYPING_ON = "typing_on"
    TYPING_OFF = "typing_off"
    MARK_SEEN = "mark_seen"


class QuickReplyChoice(BaseModel):
    """A tappable quick reply; `payload` is echoed back on tap."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(..., min_length=1)
    payload: str = Field(..., min_length=1)


class PostbackButton(BaseModel):
    """A postback button on a carousel card."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(..., min_length=1)
    payload: str = Field(..., min_length=1)


class CarouselCard(BaseModel):
    """One element of a generic template."""

    model_config = ConfigDict(frozen=True)

    title: str
    subtitle: str | None = None
    image_url: str | None = None
    buttons: list[PostbackButton] = Field(
        default_factory=list, max_length=MAX_CARD_BUTTONS
    )


class TextReply(BaseModel):
    """Plain text message."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    text: str = Field(..., min_length=1)


class QuickReplyPrompt(BaseModel):
    """Text message with quick reply choices."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["quick_reply_prompt"] = "quick_reply_prompt"
    text: str = Field(..., min_length=1)
    choices: list[QuickReplyChoice] = Field(
        ..., min_length=1, max_length=MAX_QUICK_REPLIES
    )


class Carousel(BaseModel):
    """Horizontally scrollable generic template."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["carousel"] = "carousel"
    cards: list[CarouselCard] = Field(
        ..., min_length=MIN_CAROUSEL_CARDS, max_length=MAX_CAROUSEL_CARDS
    )


class MediaAttachment(BaseModel):
    """Media attachment, optionally followed by quick replies."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["media"] = "media"
    media_type: MediaType = MediaType.IMAGE
    url: str = Field(..., min_length=1)
    quick_replies: list[QuickReplyChoice] = Field(
        default_factory=list, max_length=MAX_QUICK_REPLIES
    )


class SenderAction(BaseModel):
    """Typing indicator or read receipt."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["sender_action"] = "sender_action"
    action: SenderActionType


ReplyPayload = Annotated[
    Union[TextReply, QuickReplyPrompt, Carousel, MediaAttachment, SenderAction],
    Field(discriminator="kind"),
]
