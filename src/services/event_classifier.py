"""Webhook event classification.

Turns a decoded webhook body into a flat list of classified events. Each
messaging object is tagged by the first field present in a fixed priority
order; anything that cannot be parsed becomes an UnknownEvent instead of
raising, so one malformed event never hides the rest of the batch.
"""

from typing import Any

from pydantic import BaseModel, ValidationError

from src.models.messenger import (
    AccountLinkEvent,
    ClassifiedEvent,
    DeliveryEvent,
    MessageEvent,
    MessagingEvent,
    MessengerEntry,
    MessengerWebhookPayload,
    OptinEvent,
    PostbackEvent,
    ReadEvent,
    UnknownEvent,
)

PAGE_OBJECT = "page"

# Field name on the messaging object -> variant model, highest priority first
EVENT_PRIORITY: tuple[tuple[str, type[BaseModel]], ...] = (
    ("message", MessageEvent),
    ("postback", PostbackEvent),
    ("delivery", DeliveryEvent),
    ("read", ReadEvent),
    ("account_linking", AccountLinkEvent),
    ("optin", OptinEvent),
)


def _party_id(messaging: dict[str, Any], key: str) -> str | None:
    party = messaging.get(key)
    if isinstance(party, dict) and party.get("id") is not None:
        return str(party["id"])
    return None


def _int_or_none(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    return None


def classify_event(messaging: Any) -> MessagingEvent:
    """Tag a single messaging object with its event variant."""
    if not isinstance(messaging, dict):
        return UnknownEvent()

    for field, model in EVENT_PRIORITY:
        body = messaging.get(field)
        if body is None:
            continue
        if not isinstance(body, dict):
            break
        try:
            return model.model_validate(body)
        except ValidationError:
            break

    return UnknownEvent(fields=sorted(str(key) for key in messaging))


def classify(raw: Any) -> list[ClassifiedEvent]:
    """Classify every messaging event in a webhook body.

    Args:
        raw: Decoded JSON body of a webhook POST

    Returns:
        Classified events in entry order; empty when the body is not a
        Page subscription payload
    """
    if not isinstance(raw, dict):
        return []
    try:
        payload = MessengerWebhookPayload.model_validate(raw)
    except ValidationError:
        return []
    if payload.object != PAGE_OBJECT:
        return []

    classified: list[ClassifiedEvent] = []
    for raw_entry in payload.entry:
        if not isinstance(raw_entry, dict):
            continue
        try:
            entry = MessengerEntry.model_validate(raw_entry)
        except ValidationError:
            continue

        for messaging in entry.messaging:
            is_mapping = isinstance(messaging, dict)
            classified.append(
                ClassifiedEvent(
                    page_id=entry.id,
                    page_time=entry.time,
                    sender_id=_party_id(messaging, "sender") if is_mapping else None,
                    recipient_id=(
                        _party_id(messaging, "recipient") if is_mapping else None
                    ),
                    timestamp=(
                        _int_or_none(messaging.get("timestamp")) if is_mapping else None
                    ),
                    event=classify_event(messaging),
                )
            )

    return classified
