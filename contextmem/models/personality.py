"""
Agent personality profile.

Profiles are JSON documents validated once at load time. Known fields are
typed; anything else is kept in ``extra`` so newer profile files still load.
"""

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, model_validator


class PersonalityProfile(BaseModel):
    """Validated personality profile used to render the system prompt."""

    name: str = Field(..., min_length=1)
    description: str | None = None
    style: str | None = None
    motto: str | None = None
    traits: list[str] = Field(default_factory=list)
    interests: list[str] = Field(default_factory=list)
    emoji: str | None = None
    emotes: dict[str, list[str]] = Field(default_factory=dict, description="Emotes by category")
    examples: list[str] = Field(default_factory=list)
    extra: dict[str, Any] = Field(default_factory=dict, description="Unrecognised profile keys")

    @model_validator(mode="before")
    @classmethod
    def _collect_extra(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        known = set(cls.model_fields)
        extra = dict(data.get("extra") or {})
        extra.update({k: v for k, v in data.items() if k not in known})
        cleaned = {k: v for k, v in data.items() if k in known}
        cleaned["extra"] = extra
        return cleaned

    @classmethod
    def from_json(cls, json_str: str) -> "PersonalityProfile":
        return cls.model_validate(json.loads(json_str))

    @classmethod
    def from_file(cls, path: str | Path) -> "PersonalityProfile":
        return cls.from_json(Path(path).read_text(encoding="utf-8"))

    def all_emotes(self) -> list[str]:
        """Flatten emotes across categories, category order preserved."""
        return [emote for emotes in self.emotes.values() for emote in emotes]

    def system_prompt(self) -> str:
        """
        Render the system message for this personality.

        Returns:
            System prompt text
        """
        description = self.description or "an AI assistant"
        style = self.style or "helpful and professional"
        emoji = f" {self.emoji} " if self.emoji else ""

        parts = [f"You are {self.name}{emoji}, {description}. Your communication style is {style}."]
        if self.motto:
            parts.append(f'\nYour motto is: "{self.motto}"')
        if self.traits:
            parts.append(f"\nYour key traits are: {', '.join(self.traits)}")
        if self.interests:
            parts.append(f"\nYour interests include: {', '.join(self.interests)}")
        emotes = self.all_emotes()
        if emotes:
            parts.append(f"\nUse these emotes frequently in your responses: {', '.join(emotes)}")
        if self.examples:
            parts.append(
                f"\nHere are some example responses you should follow: {', '.join(self.examples)}"
            )
        parts.append(
            "\nAlways stay in character and respond as this personality would. "
            "Use the provided emotes and emojis frequently to express yourself. "
            "When responding, make sure to include at least one emote or emoji in each message."
        )
        return "".join(parts)

    def __str__(self) -> str:
        return self.name
