"""Core domain models.

Every piece of generated content is an immutable pydantic model. Python
attributes are snake_case; the JSON the model returns (and the JSON we
persist) uses camelCase, so each model carries a camelCase alias generator
and accepts either spelling on input.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

GameMode = Literal["alchemy", "emoji", "dilemma", "ladder", "cipher", "arena"]

# Modes served through a batch prefetch queue.
QUEUED_MODES: tuple[GameMode, ...] = ("emoji", "dilemma", "ladder", "cipher", "arena")

Language = Literal["English", "Portuguese"]

DifficultyTier = Literal["Easy", "Medium", "Hard", "Legendary"]


class ContentItem(BaseModel):
    """Base for every unit of generated content."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    def to_json_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class QueuedItem(ContentItem):
    """Content served through a prefetch queue and remembered in history."""

    @property
    @abstractmethod
    def identity(self) -> str:
        """The value recorded in history once the item has been played."""


class AlchemyCombination(ContentItem):
    name: str = Field(min_length=1)
    emoji: str


class AlchemyResult(ContentItem):
    """A combination handed to the caller; is_new is False on a cache hit."""

    name: str
    emoji: str
    is_new: bool


class AlchemyElement(ContentItem):
    """An entry of the player's alchemy inventory."""

    id: str
    name: str
    emoji: str


class EmojiPuzzle(QueuedItem):
    emojis: str = Field(min_length=1)
    answer: str = Field(min_length=1)
    hints: list[str] = Field(min_length=5, max_length=5)

    @property
    def identity(self) -> str:
        return self.answer


class Dilemma(QueuedItem):
    title: str = Field(min_length=1)
    description: str
    option_a: str
    option_b: str
    consequence_a: str
    consequence_b: str

    @property
    def identity(self) -> str:
        return self.title


class WordLadderEndpoints(QueuedItem):
    start_word: str = Field(min_length=1)
    end_word: str = Field(min_length=1)
    start_emoji: str
    end_emoji: str

    @property
    def identity(self) -> str:
        return f"{self.start_word} -> {self.end_word}"


class WordLadderStepVerdict(ContentItem):
    is_valid: bool
    message: str
    emoji: str | None = None
    proximity: int | None = Field(default=None, ge=0, le=100)


class CipherPuzzle(QueuedItem):
    original: str = Field(min_length=1)
    encrypted: str
    rule: str
    category: str

    @property
    def identity(self) -> str:
        return self.original


class ArenaCreature(QueuedItem):
    creature: str = Field(min_length=1)
    emoji: str
    description: str
    difficulty_tier: DifficultyTier

    @property
    def identity(self) -> str:
        return self.creature


class ArenaCombatVerdict(ContentItem):
    success: bool
    commentary: str
    survival_chance: int = Field(ge=0, le=100)
    damage_dealt: int = Field(ge=0, le=100)


class PromptSpec(BaseModel):
    """One fully-built model request. Built fresh per call, never persisted."""

    model_config = ConfigDict(frozen=True)

    kind: str
    instruction_text: str
    response_schema: dict
    locale: Language
