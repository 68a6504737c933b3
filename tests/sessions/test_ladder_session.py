"""Tests for LadderSession."""

import pytest

from nebula_arcade.sessions import LadderSession, SessionStatus
from nebula_arcade.sessions.ladder import FALLBACK_STEP_EMOJI, LadderStep

ENDPOINTS = {"startWord": "Sun", "endWord": "Night", "startEmoji": "☀️", "endEmoji": "🌙"}


@pytest.fixture
async def session(arcade, llm) -> LadderSession:
    llm.queue([ENDPOINTS])
    s = LadderSession(arcade)
    await s.load()
    return s


class TestLadder:
    async def test_load_seeds_first_step(self, session) -> None:
        assert session.steps == [LadderStep("Sun", "☀️")]
        assert session.current_word == "Sun"
        assert session.status is SessionStatus.READY

    async def test_direct_win_skips_validation(self, session, arcade, llm) -> None:
        assert await session.submit("  NIGHT ") is True
        assert session.won
        assert session.steps[-1] == LadderStep("Night", "🌙")
        assert session.status is SessionStatus.SUCCESS
        assert arcade.history.items("ladder") == ["Sun -> Night"]
        assert len(llm.calls) == 1

    async def test_valid_step_appended(self, session, llm) -> None:
        llm.queue({"isValid": True, "message": "Sun and moon.", "emoji": "🌕", "proximity": 70})
        assert await session.submit("Moon") is True
        assert session.steps[-1] == LadderStep("Moon", "🌕")
        assert session.proximity == 70
        assert session.status is SessionStatus.READY
        assert '"Moon"' in llm.calls[-1]["prompt"]

    async def test_valid_step_without_emoji(self, session, llm) -> None:
        llm.queue({"isValid": True, "message": "Warm things."})
        await session.submit("Heat")
        assert session.steps[-1] == LadderStep("Heat", FALLBACK_STEP_EMOJI)

    async def test_invalid_step_sets_feedback(self, session, llm) -> None:
        llm.queue({"isValid": False, "message": "Bananas have nothing to do with the sun."})
        assert await session.submit("Banana") is False
        assert session.feedback == "Bananas have nothing to do with the sun."
        assert session.status is SessionStatus.WRONG
        assert len(session.steps) == 1

    async def test_step_verdicts_cached(self, session, llm) -> None:
        llm.queue({"isValid": False, "message": "No."})
        await session.submit("Banana")
        await session.submit("banana")
        assert len(llm.calls) == 2

    async def test_blank_guess_ignored(self, session, llm) -> None:
        assert await session.submit("   ") is False
        assert len(llm.calls) == 1

    async def test_no_moves_after_win(self, session) -> None:
        await session.submit("Night")
        assert await session.submit("Day") is False
