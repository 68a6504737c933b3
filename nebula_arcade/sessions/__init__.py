"""Per-game session controllers.

Each controller wraps one Arcade and exposes UI-facing state: a status
(see SessionStatus), the current item, and game-specific scoring.
"""

from .alchemy import AlchemySession  # noqa: F401
from .arena import ArenaSession  # noqa: F401
from .base import GameSession, SessionStatus, normalize_guess  # noqa: F401
from .cipher import CipherSession  # noqa: F401
from .dilemma import DilemmaSession  # noqa: F401
from .emoji import EmojiSession  # noqa: F401
from .ladder import LadderSession  # noqa: F401
