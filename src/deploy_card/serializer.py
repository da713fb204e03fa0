"""Conversion of a :class:`WebhookBody` into an Adaptive Card message."""

from __future__ import annotations

import base64
import json
from io import BytesIO
from typing import Any, Dict, List

from PIL import Image

from .layouts import DEFAULT_THEME_COLOR
from .models import CardSection, ChangelogItem, WebhookBody

ADAPTIVE_CARD_SCHEMA = "http://adaptivecards.io/schemas/adaptive-card.json"
ADAPTIVE_CARD_VERSION = "1.4"
SWATCH_SIZE = (3, 3)

JSONDict = Dict[str, Any]


def render_swatch(color: str) -> str:
    """Return a PNG data URI of a small image filled with ``color``."""

    image = Image.new("RGB", SWATCH_SIZE, f"#{color.lstrip('#')}")
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:image/png;base64,{encoded}"


def _text_block(text: str, **options: Any) -> JSONDict:
    return {"type": "TextBlock", "text": text, "wrap": True, **options}


def _activity_columns(section: CardSection) -> JSONDict:
    text_items: List[JSONDict] = []
    if section.activity_title:
        text_items.append(
            _text_block(section.activity_title, height="stretch", maxLines=2, spacing="None")
        )
    if section.activity_subtitle:
        text_items.append(_text_block(section.activity_subtitle, isSubtle=True, spacing="None"))
    if section.activity_text:
        text_items.append(_text_block(section.activity_text, spacing="None"))

    return {
        "type": "ColumnSet",
        "columns": [
            {
                "type": "Column",
                "width": "auto",
                "items": [
                    {
                        "type": "Image",
                        "size": "Medium",
                        "style": "Default",
                        "url": section.activity_image,
                    }
                ],
            },
            {"type": "Column", "width": "stretch", "items": text_items},
        ],
    }


def _changelog_container(item: ChangelogItem) -> JSONDict:
    items: List[JSONDict] = [{"type": "TextBlock", "text": " ", "separator": True}]
    if item.title or item.subtitle:
        items.append(
            {
                "type": "ColumnSet",
                "columns": [
                    {
                        "type": "Column",
                        "width": "auto",
                        "items": [_text_block(item.subtitle, fontType="Monospace")],
                    },
                    {
                        "type": "Column",
                        "width": "stretch",
                        "items": [_text_block(item.title, weight="Bolder")],
                    },
                ],
            }
        )
    if item.description:
        items.append(
            {
                "type": "RichTextBlock",
                "inlines": [{"type": "TextRun", "text": item.description}],
            }
        )
    return {"type": "Container", "items": items}


def _section_container(section: CardSection) -> JSONDict:
    items: List[JSONDict] = [_activity_columns(section)]
    if section.facts:
        items.append(
            {
                "type": "FactSet",
                "facts": [
                    {"type": "Fact", "title": fact.name, "value": fact.value}
                    for fact in section.facts
                ],
            }
        )
    for item in section.changelog or []:
        items.append(_changelog_container(item))
    return {"type": "Container", "items": items}


def build_card(webhook_body: WebhookBody) -> JSONDict:
    """Build the message document posted to the webhook."""

    body: List[JSONDict] = []
    if webhook_body.text:
        body.append(_text_block(webhook_body.text, size="Medium", weight="Bolder"))
    body.extend(_section_container(section) for section in webhook_body.sections)

    actions = [
        {"type": "Action.OpenUrl", "title": action.name, "url": action.url}
        for section in webhook_body.sections
        for action in section.potential_action or []
    ]

    return {
        "type": "message",
        "attachments": [
            {
                "contentType": "application/vnd.microsoft.card.adaptive",
                "content": {
                    "type": "AdaptiveCard",
                    "schema": ADAPTIVE_CARD_SCHEMA,
                    "version": ADAPTIVE_CARD_VERSION,
                    "msteams": {"width": "full"},
                    "backgroundImage": {
                        "fillMode": "RepeatHorizontally",
                        "url": render_swatch(webhook_body.theme_color or DEFAULT_THEME_COLOR),
                    },
                    "body": body,
                    "actions": actions,
                },
            }
        ],
    }


def serialize(webhook_body: WebhookBody) -> str:
    """Serialize the card to JSON with stable two-space indentation."""

    return json.dumps(build_card(webhook_body), indent=2)
