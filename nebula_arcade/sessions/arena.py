from __future__ import annotations

import logging

from nebula_arcade.arcade import Arcade
from nebula_arcade.models import ArenaCombatVerdict, ArenaCreature
from nebula_arcade.sessions.base import GameSession, SessionStatus

logger = logging.getLogger(__name__)


class ArenaSession(GameSession):
    mode = "arena"

    def __init__(self, arcade: Arcade) -> None:
        super().__init__(arcade)
        self.creature: ArenaCreature | None = None
        self.verdict: ArenaCombatVerdict | None = None

    async def load(self) -> ArenaCreature | None:
        if self.busy:
            return None
        self.verdict = None
        self.creature = await self._fetch_next()
        return self.creature

    async def execute(self, strategy: str) -> ArenaCombatVerdict | None:
        """Have the model judge `strategy` against the current creature."""
        strategy = strategy.strip()
        if not strategy or self.creature is None or self.verdict is not None:
            return None
        creature = self.creature
        ok, verdict = await self._guard(
            lambda: self.arcade.evaluate_combat(creature.creature, strategy),
            pending=SessionStatus.VALIDATING,
        )
        if not ok:
            return None
        self.verdict = verdict
        self._record(creature.identity)
        self.status = SessionStatus.SUCCESS if verdict.success else SessionStatus.WRONG
        logger.info(
            "arena: %s vs %s, success=%s", strategy[:40], creature.creature, verdict.success
        )
        return verdict
