"""Semantic word ladder: walk from the start word to the end word."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from nebula_arcade.arcade import Arcade
from nebula_arcade.models import WordLadderEndpoints
from nebula_arcade.sessions.base import GameSession, SessionStatus

logger = logging.getLogger(__name__)

FALLBACK_STEP_EMOJI = "🔗"


@dataclass(frozen=True)
class LadderStep:
    word: str
    emoji: str


class LadderSession(GameSession):
    mode = "ladder"

    def __init__(self, arcade: Arcade) -> None:
        super().__init__(arcade)
        self.endpoints: WordLadderEndpoints | None = None
        self.steps: list[LadderStep] = []
        self.feedback: str | None = None
        self.proximity: int | None = None
        self.won = False

    async def load(self) -> WordLadderEndpoints | None:
        if self.busy:
            return None
        self.steps = []
        self.feedback = None
        self.proximity = None
        self.won = False
        self.endpoints = await self._fetch_next()
        if self.endpoints is not None:
            self.steps = [LadderStep(self.endpoints.start_word, self.endpoints.start_emoji)]
        return self.endpoints

    @property
    def current_word(self) -> str | None:
        return self.steps[-1].word if self.steps else None

    async def submit(self, guess: str) -> bool:
        """Try `guess` as the next step; True when it was accepted."""
        guess = guess.strip()
        if not guess or self.endpoints is None or self.won or self.busy:
            return False

        end = self.endpoints
        if guess.lower() == end.end_word.lower():
            self.steps.append(LadderStep(end.end_word, end.end_emoji))
            self.won = True
            self.feedback = None
            self.proximity = 100
            self._record(end.identity)
            self.status = SessionStatus.SUCCESS
            logger.info("ladder: solved %s in %d steps", end.identity, len(self.steps) - 1)
            return True

        current = self.current_word
        ok, verdict = await self._guard(
            lambda: self.arcade.validate_ladder_step(current, end.end_word, guess),
            pending=SessionStatus.VALIDATING,
        )
        if not ok:
            return False

        if verdict.is_valid:
            self.steps.append(LadderStep(guess, verdict.emoji or FALLBACK_STEP_EMOJI))
            self.feedback = None
            if verdict.proximity is not None:
                self.proximity = verdict.proximity
            self.status = SessionStatus.READY
            return True

        self.feedback = verdict.message
        self.status = SessionStatus.WRONG
        return False
