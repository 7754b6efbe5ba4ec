"""Help menu state machine.

The bot keeps no conversation state. A user's position in the help menu
lives entirely in the payload token echoed back by a quick reply or
postback, e.g. ``QR_PHOTO_2``. Two navigation modes read those tokens:

- Linear: a guided tour. Step 0 is the topic intro, every later step is a
  screenshot. ``Continue`` advances one step, ``Restart`` returns to the
  top-level prompt, and the final step only offers "Explore another feature".
- Branching: a topic token opens a carousel holding every step of that
  topic. Each card links straight to the other topics.

Any token that does not name a known position falls back to the top-level
prompt.
"""

import re
from enum import Enum

import logfire
from pydantic import BaseModel, ConfigDict, Field

from src.config import Settings, get_settings
from src.constants import (
    BRANCHING_TOKEN_STEP,
    CONTINUE_TITLE,
    EXPLORE_ANOTHER_TITLE,
    MAX_CAROUSEL_CARDS,
    MIN_CAROUSEL_CARDS,
    RESTART_PAYLOAD,
    RESTART_TITLE,
    TOP_LEVEL_PROMPT_TEXT,
    TOPIC_TOKEN_PREFIX,
)
from src.models.reply_models import (
    Carousel,
    CarouselCard,
    MediaAttachment,
    MediaType,
    PostbackButton,
    QuickReplyChoice,
    QuickReplyPrompt,
    ReplyPayload,
)
from src.services.topics import DEFAULT_TOPICS, Topic, TopicId, TopicTable

_TOKEN_PATTERN = re.compile(
    rf"^{TOPIC_TOKEN_PREFIX}_([A-Z]+)_(\d{{1,9}})$", re.IGNORECASE
)


class NavigationMode(str, Enum):
    """How the help menu walks through a topic."""

    LINEAR = "linear"
    BRANCHING = "branching"


class MenuStep(BaseModel):
    """A position within a topic's tour."""

    model_config = ConfigDict(frozen=True)

    topic: TopicId
    step_index: int = Field(..., ge=0)


def topic_token(topic: TopicId, step_index: int) -> str:
    """Encode a menu position as a payload token."""
    return f"{TOPIC_TOKEN_PREFIX}_{topic.value}_{step_index}"


def parse_token(token: str | None) -> MenuStep | None:
    """Decode a payload token; None for anything that is not a topic token."""
    if not token:
        return None
    match = _TOKEN_PATTERN.match(token.strip())
    if not match:
        return None
    try:
        topic = TopicId(match.group(1).upper())
    except ValueError:
        return None
    return MenuStep(topic=topic, step_index=int(match.group(2)))


def is_menu_token(token: str | None) -> bool:
    """Whether the token is RESTART or a well-formed topic token."""
    if not token:
        return False
    return token.strip().upper() == RESTART_PAYLOAD or parse_token(token) is not None


class MenuStateMachine:
    """Map payload tokens to the next help menu reply.

    Example:
        >>> menu = MenuStateMachine(NavigationMode.LINEAR, "https://example.com/img/")
        >>> menu.reply_for("QR_PHOTO_2").url
        'https://example.com/img/photo_2.png'
    """

    def __init__(
        self,
        mode: NavigationMode,
        image_base_url: str,
        topics: TopicTable = DEFAULT_TOPICS,
    ):
        """Initialize the state machine.

        Args:
            mode: Navigation mode, fixed for the lifetime of the process
            image_base_url: URL prefix prepended to step image names
            topics: Topic table; defaults to the built-in help topics
        """
        self.mode = NavigationMode(mode)
        self._image_base_url = image_base_url
        # Keep the enum order so prompts and button rows are stable
        self._topics = {
            topic_id: topics[topic_id] for topic_id in TopicId if topic_id in topics
        }

    @property
    def topics(self) -> dict[TopicId, Topic]:
        return dict(self._topics)

    def image_url(self, image: str) -> str:
        return f"{self._image_base_url}{image}"

    def step_count(self, topic_id: TopicId) -> int:
        """Number of addressable steps of a topic in the current mode."""
        steps = len(self._topics[topic_id].steps)
        return steps + 1 if self.mode is NavigationMode.LINEAR else steps

    def entry_token(self, topic_id: TopicId) -> str:
        """Token that opens a topic from the top-level prompt."""
        if self.mode is NavigationMode.LINEAR:
            return topic_token(topic_id, 0)
        return topic_token(topic_id, BRANCHING_TOKEN_STEP)

    def top_level_prompt(self) -> QuickReplyPrompt:
        """The feature picker every walk starts from and falls back to."""
        return QuickReplyPrompt(
            text=TOP_LEVEL_PROMPT_TEXT,
            choices=[
                QuickReplyChoice(title=topic.title, payload=self.entry_token(topic_id))
                for topic_id, topic in self._topics.items()
            ],
        )

    def reply_for(self, token: str | None) -> ReplyPayload | None:
        """Compute the reply to a tapped or typed payload token.

        Returns:
            The next reply, or None when the reply has to be dropped because
            the topic table cannot produce a valid carousel
        """
        step = parse_token(token)
        if step is None or step.topic not in self._topics:
            if token and token.strip().upper() != RESTART_PAYLOAD:
                logfire.debug(
                    "Unrecognized menu token, showing top-level prompt", token=token
                )
            return self.top_level_prompt()

        if self.mode is NavigationMode.BRANCHING:
            return self._carousel_for(step.topic)
        return self._linear_step(step)

    # =========================================================================
    # Branching mode
    # =========================================================================

    def _carousel_for(self, topic_id: TopicId) -> Carousel | None:
        topic = self._topics[topic_id]
        card_count = len(topic.steps)
        if not MIN_CAROUSEL_CARDS <= card_count <= MAX_CAROUSEL_CARDS:
            logfire.error(
                "Topic cannot be shown as a carousel, reply dropped",
                topic=topic_id.value,
                card_count=card_count,
                min_cards=MIN_CAROUSEL_CARDS,
                max_cards=MAX_CAROUSEL_CARDS,
            )
            return None

        buttons = [
            PostbackButton(title=other.title, payload=self.entry_token(other_id))
            for other_id, other in self._topics.items()
            if other_id is not topic_id
        ]
        return Carousel(
            cards=[
                CarouselCard(
                    title=topic.title,
                    subtitle=step.subtitle,
                    image_url=self.image_url(step.image),
                    buttons=buttons,
                )
                for step in topic.steps
            ]
        )

    # =========================================================================
    # Linear mode
    # =========================================================================

    def _linear_step(self, step: MenuStep) -> ReplyPayload:
        topic = self._topics[step.topic]
        last_index = self.step_count(step.topic) - 1
        if step.step_index > last_index:
            logfire.debug(
                "Menu step out of range, showing top-level prompt",
                topic=step.topic.value,
                step_index=step.step_index,
                last_index=last_index,
            )
            return self.top_level_prompt()

        if step.step_index == last_index:
            choices = [
                QuickReplyChoice(title=EXPLORE_ANOTHER_TITLE, payload=RESTART_PAYLOAD)
            ]
        else:
            choices = [
                QuickReplyChoice(title=RESTART_TITLE, payload=RESTART_PAYLOAD),
                QuickReplyChoice(
                    title=CONTINUE_TITLE,
                    payload=topic_token(step.topic, step.step_index + 1),
                ),
            ]

        if step.step_index == 0:
            return QuickReplyPrompt(text=topic.intro, choices=choices)

        image = topic.steps[step.step_index - 1].image
        return MediaAttachment(
            media_type=MediaType.IMAGE,
            url=self.image_url(image),
            quick_replies=choices,
        )


def get_menu_state_machine(settings: Settings | None = None) -> MenuStateMachine:
    """Factory function to create the configured MenuStateMachine.

    Args:
        settings: Optional settings; uses get_settings() if not provided

    Returns:
        MenuStateMachine for the configured navigation mode
    """
    settings = settings or get_settings()
    return MenuStateMachine(
        mode=NavigationMode(settings.navigation_mode),
        image_base_url=settings.image_base_url,
    )
