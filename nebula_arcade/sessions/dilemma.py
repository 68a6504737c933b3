from __future__ import annotations

from typing import Literal

from nebula_arcade.arcade import Arcade
from nebula_arcade.models import Dilemma
from nebula_arcade.sessions.base import GameSession, SessionStatus


class DilemmaSession(GameSession):
    mode = "dilemma"

    def __init__(self, arcade: Arcade) -> None:
        super().__init__(arcade)
        self.dilemma: Dilemma | None = None
        self.choice: Literal["A", "B"] | None = None

    async def load(self) -> Dilemma | None:
        if self.busy:
            return None
        self.choice = None
        self.dilemma = await self._fetch_next()
        return self.dilemma

    def choose(self, option: Literal["A", "B"]) -> str | None:
        """Pick an option and return its consequence."""
        if self.dilemma is None or self.choice is not None:
            return None
        if option not in ("A", "B"):
            raise ValueError(f"option must be 'A' or 'B', got {option!r}")
        self.choice = option
        self._record(self.dilemma.identity)
        self.status = SessionStatus.SUCCESS
        if option == "A":
            return self.dilemma.consequence_a
        return self.dilemma.consequence_b
