"""Infinite alchemy: combine two inventory elements into a new one."""

from __future__ import annotations

import logging
import uuid

from nebula_arcade.arcade import Arcade
from nebula_arcade.models import AlchemyElement, AlchemyResult, Language
from nebula_arcade.sessions.base import GameSession, SessionStatus
from nebula_arcade.storage import load_json, save_json

logger = logging.getLogger(__name__)

ELEMENTS_KEY = "alchemy_elements"
MAX_SELECTION = 2

STARTING_ELEMENTS: dict[Language, list[tuple[str, str]]] = {
    "English": [("Water", "💧"), ("Fire", "🔥"), ("Earth", "🌍"), ("Air", "💨")],
    "Portuguese": [("Água", "💧"), ("Fogo", "🔥"), ("Terra", "🌍"), ("Ar", "💨")],
}


def starting_elements(language: Language) -> list[AlchemyElement]:
    return [
        AlchemyElement(id=str(i), name=name, emoji=emoji)
        for i, (name, emoji) in enumerate(STARTING_ELEMENTS[language], start=1)
    ]


class AlchemySession(GameSession):
    mode = "alchemy"

    def __init__(self, arcade: Arcade) -> None:
        super().__init__(arcade)
        self.selected: list[AlchemyElement] = []
        self.recent: AlchemyResult | None = None
        self.discovered = False
        self.elements = self._load_elements()

    def _load_elements(self) -> list[AlchemyElement]:
        raw = load_json(self.arcade.store, ELEMENTS_KEY, None)
        if not raw:
            return starting_elements(self.arcade.language())
        return [AlchemyElement.model_validate(e) for e in raw]

    def _save_elements(self) -> None:
        save_json(self.arcade.store, ELEMENTS_KEY, [e.to_json_dict() for e in self.elements])

    def find(self, name: str) -> AlchemyElement | None:
        wanted = name.strip().lower()
        for element in self.elements:
            if element.name.lower() == wanted:
                return element
        return None

    def select(self, element: AlchemyElement) -> bool:
        """Add `element` to the selection; False once two are selected."""
        if len(self.selected) >= MAX_SELECTION:
            return False
        self.selected.append(element)
        return True

    def clear_selection(self) -> None:
        self.selected = []

    async def combine(self) -> AlchemyResult | None:
        if len(self.selected) != MAX_SELECTION:
            return None
        if self.closed or self.busy or self.quota_exhausted:
            return None
        first, second = self.selected
        ok, result = await self._guard(
            lambda: self.arcade.combine_elements(first.name, second.name)
        )
        if self.closed:
            return None
        self.selected = []
        if not ok:
            return None

        existing = self.find(result.name)
        self.discovered = existing is None
        if existing is None:
            element = AlchemyElement(id=uuid.uuid4().hex, name=result.name, emoji=result.emoji)
            self.elements.insert(0, element)
            self._save_elements()
            logger.info("alchemy: discovered %s %s", result.emoji, result.name)
            self.recent = result
        else:
            self.recent = AlchemyResult(name=existing.name, emoji=existing.emoji, is_new=False)
        self.status = SessionStatus.SUCCESS
        return self.recent

    def reset(self) -> None:
        self.elements = starting_elements(self.arcade.language())
        self.selected = []
        self.recent = None
        self.discovered = False
        self._save_elements()
        self.status = SessionStatus.IDLE
