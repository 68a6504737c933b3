from __future__ import annotations

from nebula_arcade.arcade import Arcade
from nebula_arcade.models import CipherPuzzle
from nebula_arcade.sessions.base import GameSession, SessionStatus, normalize_guess


class CipherSession(GameSession):
    """Decode an encrypted phrase. The rule stays hidden until asked for."""

    mode = "cipher"

    def __init__(self, arcade: Arcade) -> None:
        super().__init__(arcade)
        self.puzzle: CipherPuzzle | None = None
        self.rule_shown = False
        self.revealed = False

    async def load(self) -> CipherPuzzle | None:
        if self.busy:
            return None
        self.rule_shown = False
        self.revealed = False
        self.puzzle = await self._fetch_next()
        return self.puzzle

    def show_rule(self) -> str | None:
        if self.puzzle is None:
            return None
        self.rule_shown = True
        return self.puzzle.rule

    def submit(self, guess: str) -> bool:
        if self.puzzle is None or self.revealed or self.status is SessionStatus.SUCCESS:
            return False
        g = normalize_guess(guess)
        if g and g == normalize_guess(self.puzzle.original):
            self._record(self.puzzle.identity)
            self.status = SessionStatus.SUCCESS
            return True
        self.status = SessionStatus.WRONG
        return False

    def give_up(self) -> str | None:
        """Reveal the answer; it still counts as played."""
        if self.puzzle is None:
            return None
        self.revealed = True
        self._record(self.puzzle.identity)
        return self.puzzle.original

    def clear_history(self) -> None:
        self.arcade.clear_history(self.mode)
