"""Stateful tests for walking the help menu.

The server keeps no state, so each test carries the user's position in the
last payload token, exactly as the Messenger client does.
"""

import pytest

from src.services.event_classifier import classify
from src.services.message_processor import EventProcessor
from src.services.topics import TopicId


def _tap(make_envelope, payload):
    return classify(
        make_envelope({"message": {"mid": "m", "text": "tap", "quick_reply": {"payload": payload}}})
    )[0]


@pytest.fixture
def linear_processor(linear_menu, mock_messaging_service):
    return EventProcessor(
        menu=linear_menu,
        messaging_service_factory=lambda token: mock_messaging_service,
        page_access_token="test-page-token",
    )


class TestMenuWalkStateful:
    """Test multi-turn walks through the help menu."""

    @pytest.mark.asyncio
    async def test_walk_every_topic_in_turn(
        self, linear_processor, linear_menu, mock_messaging_service, make_envelope
    ):
        """Start from the prompt, finish each topic, and come back."""
        prompt = linear_menu.top_level_prompt()
        visited = []

        for choice in prompt.choices:
            token = choice.payload
            while token != "RESTART":
                await linear_processor.process(_tap(make_envelope, token))
                quick_replies = mock_messaging_service.sent_messages[-1]["message"][
                    "quick_replies"
                ]
                token = quick_replies[-1]["payload"]
            visited.append(choice.title)

            # Back at the top-level prompt
            await linear_processor.process(_tap(make_envelope, token))
            last = mock_messaging_service.sent_messages[-1]["message"]
            assert last["text"] == "Select a feature to learn more."

        # Verify invariants
        assert visited == ["Rotation", "Photo", "Caption", "Background"]
        expected_sends = sum(linear_menu.step_count(t) + 1 for t in TopicId)
        assert len(mock_messaging_service.sent_messages) == expected_sends

    @pytest.mark.asyncio
    async def test_restart_mid_topic(
        self, linear_processor, mock_messaging_service, make_envelope
    ):
        """Restart from the middle of a topic, then pick a different one."""
        await linear_processor.process(_tap(make_envelope, "QR_BACKGROUND_3"))
        await linear_processor.process(_tap(make_envelope, "RESTART"))
        await linear_processor.process(_tap(make_envelope, "QR_CAPTION_0"))

        sent = [m["message"] for m in mock_messaging_service.sent_messages]
        assert sent[0]["attachment"]["payload"]["url"].endswith("background_3.png")
        assert sent[1]["text"] == "Select a feature to learn more."
        assert [qr["payload"] for qr in sent[2]["quick_replies"]] == ["RESTART", "QR_CAPTION_1"]

    @pytest.mark.asyncio
    async def test_replayed_token_gives_same_reply(
        self, linear_processor, mock_messaging_service, make_envelope
    ):
        """An old quick reply tapped again reproduces the same step."""
        for _ in range(3):
            await linear_processor.process(_tap(make_envelope, "QR_PHOTO_2"))

        first, second, third = mock_messaging_service.sent_messages
        assert first == second == third

    @pytest.mark.asyncio
    async def test_branching_hops_between_topics(
        self, branching_menu, mock_messaging_service, make_envelope
    ):
        """Follow the first card's buttons from topic to topic."""
        processor = EventProcessor(
            menu=branching_menu,
            messaging_service_factory=lambda token: mock_messaging_service,
            page_access_token="test-page-token",
        )
        token = "QR_ROTATION_1"
        titles = []

        for _ in range(4):
            event = classify(make_envelope({"postback": {"payload": token}}))[0]
            await processor.process(event)
            elements = mock_messaging_service.sent_messages[-1]["message"]["attachment"][
                "payload"
            ]["elements"]
            titles.append(elements[0]["title"])
            token = elements[0]["buttons"][-1]["payload"]

        # The last button always points at the last other topic
        assert titles == ["Rotation", "Background", "Caption", "Background"]
