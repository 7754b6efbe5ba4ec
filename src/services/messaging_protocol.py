"""Messaging abstraction protocols for decoupling from Facebook API.

This module provides a Protocol-based abstraction for the outbound side,
allowing the application to:
- Mock messaging in tests without complex httpx mocking
- Keep the event processor unaware of the Graph API
- Support dependency injection for cleaner architecture
"""

from typing import Any, Protocol

import logfire

from src.services.facebook_service import SendApiError


class MessagingService(Protocol):
    """Protocol for sending built messages.

    Implementations must never raise for a failed send; they report the
    outcome instead so one failure cannot affect other events.
    """

    async def send(self, message: dict[str, Any]) -> bool:
        """Send a built Send API body.

        Args:
            message: Body produced by reply_builder.build_message()

        Returns:
            True if message sent successfully, False otherwise
        """
        ...


class FacebookMessagingService:
    """Facebook Messenger implementation of MessagingService.

    Wraps facebook_service.send_message() while providing the
    MessagingService protocol interface. Failed sends are logged and
    reported as False; they are never retried.

    Example:
        >>> service = FacebookMessagingService(page_access_token="...")
        >>> await service.send({"recipient": {"id": "user123"}, "message": {"text": "Hi"}})
        True
    """

    def __init__(self, page_access_token: str):
        """Initialize with Facebook Page access token.

        Args:
            page_access_token: Facebook Page access token for API calls
        """
        if not page_access_token:
            raise ValueError("page_access_token is required")
        self._token = page_access_token

    async def send(self, message: dict[str, Any]) -> bool:
        from src.services.facebook_service import send_message

        try:
            await send_message(page_access_token=self._token, message=message)
            return True
        except SendApiError as e:
            logfire.error(
                "FacebookMessagingService.send failed",
                recipient_id=message.get("recipient", {}).get("id"),
                status_code=e.status_code,
                status_text=e.status_text,
                error_body=e.body,
            )
            return False


class MockMessagingService:
    """Mock implementation for testing.

    Allows tests to verify messaging behavior without making real API calls.

    Example:
        >>> service = MockMessagingService()
        >>> await service.send({"recipient": {"id": "user123"}, "message": {"text": "Hi"}})
        True
        >>> len(service.sent_messages)
        1
    """

    def __init__(self, should_fail_send: bool = False):
        """Initialize mock service.

        Args:
            should_fail_send: Whether send should return False
        """
        self._should_fail_send = should_fail_send
        self.sent_messages: list[dict[str, Any]] = []

    async def send(self, message: dict[str, Any]) -> bool:
        """Record sent message and return configured result."""
        self.sent_messages.append(message)
        return not self._should_fail_send


def get_messaging_service(page_access_token: str) -> FacebookMessagingService:
    """Factory function to get a MessagingService implementation.

    Args:
        page_access_token: Facebook Page access token

    Returns:
        MessagingService implementation (currently Facebook)
    """
    return FacebookMessagingService(page_access_token=page_access_token)
