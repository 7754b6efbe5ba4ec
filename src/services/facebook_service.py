"""Send messages to Facebook Graph API service."""

import time
from typing import Any

import httpx
import logfire

from src.config import get_settings
from src.constants import ERROR_BODY_LOG_CHARS, FACEBOOK_GRAPH_API_VERSION

GRAPH_API_BASE_URL = f"https://graph.facebook.com/{FACEBOOK_GRAPH_API_VERSION}"
SEND_API_URL = f"{GRAPH_API_BASE_URL}/me/messages"
MESSENGER_PROFILE_URL = f"{GRAPH_API_BASE_URL}/me/messenger_profile"


class SendApiError(Exception):
    """Raised when a Graph API call fails.

    Attributes:
        status_code: HTTP status returned by Facebook, None for transport errors
        status_text: HTTP reason phrase or transport error name
        body: Response body (truncated) or transport error message
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        status_text: str | None = None,
        body: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.status_text = status_text
        self.body = body


def _message_kind(message: dict[str, Any]) -> str:
    if "sender_action" in message:
        return "sender_action"
    content = message.get("message", {})
    if "attachment" in content:
        return content["attachment"].get("type", "attachment")
    return "text"


async def _post_graph(
    url: str,
    page_access_token: str,
    payload: dict[str, Any],
    log_context: dict[str, Any],
) -> dict[str, Any]:
    """POST to the Graph API, returning the decoded 200 body or raising."""
    start_time = time.time()
    params = {"access_token": page_access_token}

    try:
        settings = get_settings()
        async with httpx.AsyncClient(
            timeout=settings.facebook_api_timeout_seconds
        ) as client:
            response = await client.post(url, params=params, json=payload)
    except httpx.RequestError as e:
        elapsed = time.time() - start_time
        logfire.error(
            "Facebook API request error",
            **log_context,
            error=str(e),
            error_type=type(e).__name__,
            response_time_ms=elapsed * 1000,
        )
        raise SendApiError(
            f"Facebook API request failed: {e}",
            status_text=type(e).__name__,
            body=str(e),
        ) from e

    elapsed = time.time() - start_time
    if response.status_code != 200:
        body = response.text[:ERROR_BODY_LOG_CHARS]
        logfire.error(
            "Facebook API call failed",
            **log_context,
            status_code=response.status_code,
            status_text=response.reason_phrase,
            response_body=body,
            response_time_ms=elapsed * 1000,
        )
        raise SendApiError(
            f"Facebook API returned {response.status_code}",
            status_code=response.status_code,
            status_text=response.reason_phrase,
            body=body,
        )

    try:
        data = response.json()
    except ValueError:
        data = {}
    logfire.info(
        "Facebook API call succeeded",
        **log_context,
        status_code=response.status_code,
        response_time_ms=elapsed * 1000,
    )
    return data if isinstance(data, dict) else {}


async def send_message(
    page_access_token: str,
    message: dict[str, Any],
) -> str | None:
    """
    Send a built message via the Facebook Send API.

    Args:
        page_access_token: Facebook Page access token
        message: Send API body with `recipient` and `message` or `sender_action`

    Returns:
        The `message_id` reported by Facebook, if any

    Raises:
        SendApiError: On a non-200 response or a transport error
    """
    recipient_id = message.get("recipient", {}).get("id")
    log_context = {
        "recipient_id": recipient_id,
        "message_kind": _message_kind(message),
        "api_version": FACEBOOK_GRAPH_API_VERSION,
    }
    logfire.info("Sending Facebook message", **log_context)

    data = await _post_graph(SEND_API_URL, page_access_token, message, log_context)

    message_id = data.get("message_id")
    if message_id:
        logfire.info(
            "Facebook message delivered to Send API",
            message_id=message_id,
            recipient_id=data.get("recipient_id", recipient_id),
        )
    return message_id


async def set_get_started(page_access_token: str, payload: str) -> None:
    """
    Configure the Page's "Get Started" button.

    Args:
        page_access_token: Facebook Page access token
        payload: Postback payload sent when the button is tapped

    Raises:
        SendApiError: On a non-200 response or a transport error
    """
    log_context = {"setting": "get_started", "payload": payload}
    await _post_graph(
        MESSENGER_PROFILE_URL,
        page_access_token,
        {"get_started": {"payload": payload}},
        log_context,
    )
