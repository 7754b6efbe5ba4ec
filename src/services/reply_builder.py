"""Render replies as Facebook Send API request bodies."""

from typing import Any

from src.models.reply_models import (
    Carousel,
    MediaAttachment,
    QuickReplyChoice,
    QuickReplyPrompt,
    ReplyPayload,
    SenderAction,
    TextReply,
)

OutboundMessage = dict[str, Any]


def _quick_replies(choices: list[QuickReplyChoice]) -> list[dict[str, str]]:
    return [
        {"content_type": "text", "title": choice.title, "payload": choice.payload}
        for choice in choices
    ]


def _generic_template(carousel: Carousel) -> dict[str, Any]:
    elements = []
    for card in carousel.cards:
        element: dict[str, Any] = {"title": card.title}
        if card.subtitle:
            element["subtitle"] = card.subtitle
        if card.image_url:
            element["image_url"] = card.image_url
        if card.buttons:
            element["buttons"] = [
                {"type": "postback", "title": button.title, "payload": button.payload}
                for button in card.buttons
            ]
        elements.append(element)

    return {
        "type": "template",
        "payload": {"template_type": "generic", "elements": elements},
    }


def build_message(reply: ReplyPayload, recipient_id: str) -> OutboundMessage:
    """
    Build the Send API body for a reply.

    Args:
        reply: Reply to render
        recipient_id: Facebook user ID (PSID) to address

    Returns:
        JSON-serializable request body for POST /me/messages
    """
    body: OutboundMessage = {"recipient": {"id": recipient_id}}

    if isinstance(reply, SenderAction):
        body["sender_action"] = reply.action.value
        return body

    if isinstance(reply, TextReply):
        message: dict[str, Any] = {"text": reply.text}
    elif isinstance(reply, QuickReplyPrompt):
        message = {"text": reply.text, "quick_replies": _quick_replies(reply.choices)}
    elif isinstance(reply, Carousel):
        message = {"attachment": _generic_template(reply)}
    elif isinstance(reply, MediaAttachment):
        message = {
            "attachment": {
                "type": reply.media_type.value,
                "payload": {"url": reply.url},
            }
        }
        if reply.quick_replies:
            message["quick_replies"] = _quick_replies(reply.quick_replies)
    else:
        raise TypeError(f"Unsupported reply type: {type(reply).__name__}")

    body["message"] = message
    return body
