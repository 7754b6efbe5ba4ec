"""Help topic table.

One table drives both navigation modes: each topic has a title, an intro
sentence used by the linear tour, and an ordered list of illustrated steps.
"""

from enum import Enum
from types import MappingProxyType
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field


class TopicId(str, Enum):
    """The closed set of help topics."""

    ROTATION = "ROTATION"
    PHOTO = "PHOTO"
    CAPTION = "CAPTION"
    BACKGROUND = "BACKGROUND"


class TopicStep(BaseModel):
    """One illustrated step of a topic."""

    model_config = ConfigDict(frozen=True)

    subtitle: str
    image: str = Field(..., description="Screenshot file name under the asset path")


class Topic(BaseModel):
    """A help topic and its steps."""

    model_config = ConfigDict(frozen=True)

    title: str
    intro: str
    steps: tuple[TopicStep, ...]


TopicTable = Mapping[TopicId, Topic]


DEFAULT_TOPICS: TopicTable = MappingProxyType(
    {
        TopicId.ROTATION: Topic(
            title="Rotation",
            intro="Portrait or landscape? Here's how to turn a photo the right way up.",
            steps=(
                TopicStep(
                    subtitle="Tap the rotate icon at the top of the editor.",
                    image="rotation_1.png",
                ),
                TopicStep(
                    subtitle="Each tap turns the photo 90 degrees clockwise.",
                    image="rotation_2.png",
                ),
            ),
        ),
        TopicId.PHOTO: Topic(
            title="Photo",
            intro="Swap the picture in any frame without starting over.",
            steps=(
                TopicStep(
                    subtitle="Tap the frame you want to change.",
                    image="photo_1.png",
                ),
                TopicStep(
                    subtitle="Choose Replace Photo from the menu.",
                    image="photo_2.png",
                ),
                TopicStep(
                    subtitle="Pick a new photo from your camera roll.",
                    image="photo_3.png",
                ),
            ),
        ),
        TopicId.CAPTION: Topic(
            title="Caption",
            intro="Add a few words under a photo to tell its story.",
            steps=(
                TopicStep(
                    subtitle="Tap the photo you want to caption.",
                    image="caption_1.png",
                ),
                TopicStep(
                    subtitle="Tap Add Caption below the photo.",
                    image="caption_2.png",
                ),
                TopicStep(
                    subtitle="Type your caption and pick a font.",
                    image="caption_3.png",
                ),
                TopicStep(
                    subtitle="Tap Done to place the caption.",
                    image="caption_4.png",
                ),
            ),
        ),
        TopicId.BACKGROUND: Topic(
            title="Background",
            intro="Change the background color behind your photos.",
            steps=(
                TopicStep(
                    subtitle="Tap an empty spot on the page.",
                    image="background_1.png",
                ),
                TopicStep(
                    subtitle="Tap the paint bucket in the toolbar.",
                    image="background_2.png",
                ),
                TopicStep(
                    subtitle="Swipe through the palette to pick a color.",
                    image="background_3.png",
                ),
                TopicStep(
                    subtitle="Drag the slider to adjust the shade.",
                    image="background_4.png",
                ),
                TopicStep(
                    subtitle="Tap Apply to use the color on every page.",
                    image="background_5.png",
                ),
            ),
        ),
    }
)
