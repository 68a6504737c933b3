"""Emoji movie guessing with XP, streaks and purchasable hints."""

from __future__ import annotations

from nebula_arcade.arcade import Arcade
from nebula_arcade.models import EmojiPuzzle
from nebula_arcade.sessions.base import GameSession, SessionStatus, normalize_guess

HINT_BASE_COST = 5
CORRECT_REWARD = 20
WRONG_PENALTY = 10
SKIP_PENALTY = 20

# Partial guesses shorter than this only count on an exact match.
MIN_GUESS_LENGTH = 3

# (minimum xp, title key), highest first
LEVELS = [
    (1000, "master"),
    (600, "detective"),
    (300, "movie_buff"),
    (100, "observer"),
    (0, "beginner"),
]


def level_title(xp: int) -> str:
    for threshold, title in LEVELS:
        if xp >= threshold:
            return title
    return "debtor"


def guess_matches(guess: str, answer: str) -> bool:
    g = normalize_guess(guess)
    a = normalize_guess(answer)
    if not g or not a:
        return False
    if g == a:
        return True
    if len(g) < MIN_GUESS_LENGTH:
        return False
    return a in g or g in a


class EmojiSession(GameSession):
    mode = "emoji"

    def __init__(self, arcade: Arcade) -> None:
        super().__init__(arcade)
        self.puzzle: EmojiPuzzle | None = None
        self.xp = 0
        self.streak = 0
        self.hints_revealed = 0

    async def load(self) -> EmojiPuzzle | None:
        if self.busy:
            return None
        self.hints_revealed = 0
        self.puzzle = await self._fetch_next()
        return self.puzzle

    def next_hint_cost(self) -> int:
        return (self.hints_revealed + 1) * HINT_BASE_COST

    def revealed_hints(self) -> list[str]:
        if self.puzzle is None:
            return []
        return self.puzzle.hints[: self.hints_revealed]

    def buy_hint(self) -> str | None:
        """Reveal the next hint, charging its cost. XP may go negative."""
        if self.puzzle is None or self.hints_revealed >= len(self.puzzle.hints):
            return None
        self.xp -= self.next_hint_cost()
        hint = self.puzzle.hints[self.hints_revealed]
        self.hints_revealed += 1
        return hint

    def submit(self, guess: str) -> bool:
        if self.puzzle is None or self.status not in (SessionStatus.READY, SessionStatus.WRONG):
            return False
        if guess_matches(guess, self.puzzle.answer):
            self.xp += CORRECT_REWARD
            self.streak += 1
            self._record(self.puzzle.identity)
            self.status = SessionStatus.SUCCESS
            return True
        self.xp -= WRONG_PENALTY
        self.streak = 0
        self.status = SessionStatus.WRONG
        return False

    async def skip(self) -> EmojiPuzzle | None:
        if self.busy:
            return None
        self.xp -= SKIP_PENALTY
        self.streak = 0
        return await self.load()

    def level_title(self) -> str:
        return level_title(self.xp)
