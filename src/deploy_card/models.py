"""Intermediate card structures shared by layouts and the serializer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass(frozen=True, slots=True)
class Fact:
    """A labelled key/value line shown in a card."""

    name: str
    value: str


@dataclass(frozen=True, slots=True)
class PotentialAction:
    """A clickable link surfaced as a card action.

    Only the first entry of ``target`` is used when rendering.
    """

    name: str
    target: Tuple[str, ...]

    @property
    def url(self) -> str:
        return self.target[0] if self.target else ""


@dataclass(frozen=True, slots=True)
class ChangelogItem:
    """One commit of a changelog card."""

    title: str
    subtitle: str
    description: str = ""


@dataclass(slots=True)
class CardSection:
    """A titled block within a card."""

    activity_title: str = ""
    activity_subtitle: str = ""
    activity_image: str = ""
    activity_text: Optional[str] = None
    facts: Optional[List[Fact]] = None
    potential_action: Optional[List[PotentialAction]] = None
    changelog: Optional[List[ChangelogItem]] = None


@dataclass(slots=True)
class WebhookBody:
    """Renderer-agnostic representation of a notification card."""

    text: str = ""
    theme_color: str = ""
    sections: List[CardSection] = field(default_factory=list)
