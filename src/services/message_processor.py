"""Event processing orchestration service.

The webhook handler only verifies, classifies and schedules. This service
handles one classified event at a time:
- Deciding the reply for messages, quick replies and postbacks
- Rendering the reply into a Send API body
- Handing the body to the messaging service
- Recording receipts and other non-reply events in the logs

Benefits:
- Better testability via dependency injection
- Cleaner separation of HTTP concerns from conversation logic
"""

from __future__ import annotations

import logging
from typing import Callable

import logfire

from src.config import get_settings
from src.constants import (
    ATTACHMENT_RECEIVED_TEXT,
    GET_STARTED_PAYLOAD,
    HELP_COMMANDS,
    SENDER_ACTION_COMMANDS,
)
from src.models.messenger import (
    AccountLinkEvent,
    ClassifiedEvent,
    DeliveryEvent,
    MessageEvent,
    OptinEvent,
    PostbackEvent,
    ReadEvent,
)
from src.models.reply_models import (
    ReplyPayload,
    SenderAction,
    SenderActionType,
    TextReply,
)
from src.services.menu_state_machine import (
    MenuStateMachine,
    get_menu_state_machine,
    is_menu_token,
)
from src.services.messaging_protocol import MessagingService, get_messaging_service
from src.services.reply_builder import build_message

logger = logging.getLogger(__name__)


class EventProcessor:
    """Turn classified webhook events into Send API calls.

    Example:
        >>> processor = EventProcessor()
        >>> await processor.process(classified_event)

        # With custom services for testing:
        >>> mock_messaging = MockMessagingService()
        >>> processor = EventProcessor(
        ...     menu=MenuStateMachine(NavigationMode.LINEAR, "https://host/"),
        ...     messaging_service_factory=lambda token: mock_messaging,
        ... )
    """

    def __init__(
        self,
        menu: MenuStateMachine | None = None,
        messaging_service_factory: (Callable[[str], MessagingService] | None) = None,
        page_access_token: str | None = None,
    ):
        """Initialize the event processor.

        Args:
            menu: Optional menu state machine. Uses get_menu_state_machine()
                  if not provided.
            messaging_service_factory: Optional factory function to create
                                       MessagingService instances. Receives
                                       page_access_token and returns a service.
                                       Uses get_messaging_service() if not provided.
            page_access_token: Optional token override; read from settings
                               if not provided.
        """
        self._menu = menu
        self._messaging_service_factory = (
            messaging_service_factory or get_messaging_service
        )
        self._page_access_token = page_access_token

    def _get_menu(self) -> MenuStateMachine:
        if self._menu is None:
            self._menu = get_menu_state_machine()
        return self._menu

    def _get_messaging_service(self) -> MessagingService:
        token = self._page_access_token or get_settings().facebook_page_access_token
        return self._messaging_service_factory(token)

    async def process(self, event: ClassifiedEvent) -> None:
        """Handle one classified event end-to-end.

        Never raises: a failure is logged and only affects this event.

        Args:
            event: Event produced by event_classifier.classify()
        """
        try:
            reply = self.decide_reply(event)
            if reply is None:
                return
            if not event.sender_id:
                logfire.warning(
                    "Reply computed for event without sender, skipping",
                    event_kind=event.kind.value,
                    page_id=event.page_id,
                )
                return

            message = build_message(reply, event.sender_id)
            sent = await self._get_messaging_service().send(message)
            logfire.info(
                "Event processed",
                event_kind=event.kind.value,
                page_id=event.page_id,
                sender_id=event.sender_id,
                reply_kind=reply.kind,
                sent=sent,
            )
        except Exception as e:
            logger.error("Error processing event: %s", e, exc_info=True)

    def decide_reply(self, event: ClassifiedEvent) -> ReplyPayload | None:
        """Pick the reply for an event, or None when nothing is sent."""
        body = event.event

        if isinstance(body, MessageEvent):
            return self._reply_to_message(event, body)
        if isinstance(body, PostbackEvent):
            return self._reply_to_postback(event, body)

        if isinstance(body, DeliveryEvent):
            for mid in body.mids:
                logfire.info(
                    "Message delivered",
                    sender_id=event.sender_id,
                    message_id=mid,
                    watermark=body.watermark,
                )
            logfire.info(
                "All messages delivered before watermark",
                sender_id=event.sender_id,
                watermark=body.watermark,
            )
        elif isinstance(body, ReadEvent):
            logfire.info(
                "Messages read",
                sender_id=event.sender_id,
                watermark=body.watermark,
            )
        elif isinstance(body, AccountLinkEvent):
            logfire.info(
                "Account link event",
                sender_id=event.sender_id,
                status=body.status,
                authorization_code=body.authorization_code,
            )
        elif isinstance(body, OptinEvent):
            logfire.info(
                "Authentication opt-in received",
                sender_id=event.sender_id,
                recipient_id=event.recipient_id,
                ref=body.ref,
                timestamp=event.timestamp,
            )
        else:
            logfire.info(
                "Webhook received unknown messaging event",
                sender_id=event.sender_id,
                fields=getattr(body, "fields", []),
            )
        return None

    def _reply_to_message(
        self, event: ClassifiedEvent, message: MessageEvent
    ) -> ReplyPayload | None:
        if message.is_echo:
            logfire.info(
                "Received echo for message",
                message_id=message.mid,
                recipient_id=event.recipient_id,
            )
            return None

        menu = self._get_menu()

        if message.quick_reply is not None:
            logfire.info(
                "Quick reply tapped",
                sender_id=event.sender_id,
                message_id=message.mid,
                payload=message.quick_reply.payload,
            )
            return menu.reply_for(message.quick_reply.payload)

        if message.text:
            command = message.text.strip().lower()
            if command in HELP_COMMANDS:
                return menu.top_level_prompt()
            if command in SENDER_ACTION_COMMANDS:
                return SenderAction(
                    action=SenderActionType(SENDER_ACTION_COMMANDS[command])
                )
            if is_menu_token(message.text):
                return menu.reply_for(message.text)
            return TextReply(text=message.text)

        if message.attachments:
            return TextReply(text=ATTACHMENT_RECEIVED_TEXT)

        return None

    def _reply_to_postback(
        self, event: ClassifiedEvent, postback: PostbackEvent
    ) -> ReplyPayload | None:
        logfire.info(
            "Received postback",
            sender_id=event.sender_id,
            recipient_id=event.recipient_id,
            payload=postback.payload,
            timestamp=event.timestamp,
        )
        menu = self._get_menu()
        if postback.payload == GET_STARTED_PAYLOAD:
            return menu.top_level_prompt()
        return menu.reply_for(postback.payload)


def get_event_processor(
    menu: MenuStateMachine | None = None,
    messaging_service_factory: Callable[[str], MessagingService] | None = None,
) -> EventProcessor:
    """Factory function to create an EventProcessor instance.

    Args:
        menu: Optional menu state machine
        messaging_service_factory: Optional factory for messaging services

    Returns:
        Configured EventProcessor instance
    """
    return EventProcessor(
        menu=menu,
        messaging_service_factory=messaging_service_factory,
    )
