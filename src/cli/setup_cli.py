"""Typer-based operator CLI.

Commands:
- preview: print the Send API body a payload token produces
- tour: walk the help menu locally with arrow-key selection
- get-started: configure the Page's Get Started button
"""

import os

os.environ.setdefault("LOGFIRE_IGNORE_NO_CONFIG", "1")

from pathlib import Path

_project_root = Path(__file__).resolve().parent.parent.parent
from dotenv import load_dotenv

load_dotenv(_project_root / ".env")
load_dotenv(_project_root / ".env.local")

import asyncio
import json

import questionary
import typer
from pydantic import ValidationError

from src.config import get_settings
from src.constants import GET_STARTED_PAYLOAD, RESTART_PAYLOAD
from src.models.reply_models import (
    Carousel,
    MediaAttachment,
    QuickReplyChoice,
    QuickReplyPrompt,
    ReplyPayload,
)
from src.services.facebook_service import SendApiError, set_get_started
from src.services.menu_state_machine import MenuStateMachine, NavigationMode
from src.services.reply_builder import build_message

app = typer.Typer(help="Operate the Messenger feature tour bot.")

PREVIEW_IMAGE_BASE_URL = "https://example.com/assets/screenshots/"
ACTION_EXIT = "Exit"


def _build_menu(mode: NavigationMode | None) -> MenuStateMachine:
    """Menu for the CLI; falls back to placeholder assets without settings."""
    try:
        settings = get_settings()
    except ValidationError:
        return MenuStateMachine(mode or NavigationMode.LINEAR, PREVIEW_IMAGE_BASE_URL)
    return MenuStateMachine(
        mode or NavigationMode(settings.navigation_mode),
        settings.image_base_url,
    )


def _next_choices(reply: ReplyPayload) -> list[QuickReplyChoice]:
    """Choices the user could tap after this reply."""
    if isinstance(reply, QuickReplyPrompt):
        return list(reply.choices)
    if isinstance(reply, MediaAttachment):
        return list(reply.quick_replies)
    if isinstance(reply, Carousel):
        return [
            QuickReplyChoice(title=button.title, payload=button.payload)
            for button in reply.cards[0].buttons
        ]
    return []


def _describe(reply: ReplyPayload) -> str:
    if isinstance(reply, QuickReplyPrompt):
        return reply.text
    if isinstance(reply, MediaAttachment):
        return f"[{reply.media_type.value}] {reply.url}"
    if isinstance(reply, Carousel):
        lines = [f"[carousel, {len(reply.cards)} cards]"]
        lines.extend(
            f"  {index}. {card.subtitle} ({card.image_url})"
            for index, card in enumerate(reply.cards, start=1)
        )
        return "\n".join(lines)
    return reply.model_dump_json()


@app.command()
def preview(
    token: str = typer.Argument(..., help="Payload token, e.g. QR_PHOTO_2 or RESTART"),
    mode: NavigationMode | None = typer.Option(None, help="Override NAVIGATION_MODE"),
    recipient: str = typer.Option("PSID", help="Recipient id written into the body"),
):
    """Print the Send API body produced for a payload token."""
    menu = _build_menu(mode)
    reply = menu.reply_for(token)
    if reply is None:
        typer.echo("✗ Reply dropped: topic cannot be shown as a carousel", err=True)
        raise typer.Exit(1)
    typer.echo(json.dumps(build_message(reply, recipient), indent=2))


@app.command()
def tour(
    mode: NavigationMode | None = typer.Option(None, help="Override NAVIGATION_MODE"),
):
    """Walk through the help menu as a Messenger user would."""
    menu = _build_menu(mode)
    typer.echo(f"Help menu tour ({menu.mode.value} mode)\n")
    token = RESTART_PAYLOAD

    while True:
        reply = menu.reply_for(token)
        if reply is None:
            typer.echo("✗ Reply dropped: topic cannot be shown as a carousel", err=True)
            token = RESTART_PAYLOAD
            continue

        typer.echo(f"Bot: {_describe(reply)}")
        choices = _next_choices(reply)
        titles = [choice.title for choice in choices] + [ACTION_EXIT]
        selected = questionary.select("You:", choices=titles).ask()
        if selected is None or selected == ACTION_EXIT:
            break
        token = next(choice.payload for choice in choices if choice.title == selected)

    typer.echo("Exiting tour.\n")


@app.command("get-started")
def get_started(
    payload: str = typer.Option(GET_STARTED_PAYLOAD, help="Postback payload"),
):
    """Configure the Page's Get Started button."""
    settings = get_settings()
    try:
        asyncio.run(set_get_started(settings.facebook_page_access_token, payload))
    except SendApiError as e:
        typer.echo(
            f"✗ Facebook rejected the request ({e.status_code} {e.status_text}): {e.body}",
            err=True,
        )
        raise typer.Exit(1)
    typer.echo(f"✓ Get Started button now sends {payload}")


if __name__ == "__main__":
    app()
