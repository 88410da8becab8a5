# next_edit_context/interaction_monitor.py
"""
User interaction monitor.

Records how the user responds to suggestions (accepted, rejected, ignored)
and derives two values consulted before each request:

- an aggressiveness level, from a position-weighted happiness score over the
  last 10 actions
- a debounce delay, from recent accepts/rejects with exponential time decay

One monitor is owned per editor session. It keeps two bounded buffers and is
not locked; the host serializes calls.

Design principles:
- Explicit owned state with a fixed capacity, no module-level singletons
- Injectable clock so timing behaviour is deterministic in tests
- Configuration passed in, never read from global settings at call time
"""

from __future__ import annotations

import logging
import math
import time
from collections import deque
from collections.abc import Callable

from pydantic import BaseModel, Field

from .models import (
    AggressivenessLevel,
    DebounceConfig,
    UserActionKind,
    UserHappinessScoreConfiguration,
)

logger = logging.getLogger(__name__)

MAX_INTERACTIONS_CONSIDERED = 10
# More actions are stored than scored so that skipped ignored actions can be
# replaced from deeper history
MAX_INTERACTIONS_STORED = 30

DEBOUNCE_DECAY_TIME_S = 10 * 60
MIN_DEBOUNCE_MS = 50
MAX_DEBOUNCE_MS = 3000
REJECTION_WEIGHT = 1.5
ACCEPTANCE_WEIGHT = 0.8

NEUTRAL_SCORE = 0.5


class UserAction(BaseModel):
    """One recorded user response; ``time`` is in clock seconds."""

    model_config = {"frozen": True}

    time: float
    kind: UserActionKind


class DelaySession(BaseModel):
    """Debounce parameters for one request."""

    base_debounce_ms: int = Field(..., description="Configured base debounce")
    expected_total_ms: float | None = Field(default=None, description="Adaptive debounce; None when backoff is off")
    request_time: float | None = Field(default=None, description="Clock seconds when the request was triggered")

    def get_debounce_time(self, now: float | None = None) -> float:
        """Milliseconds still to wait, accounting for time already spent since the request."""
        target = self.expected_total_ms if self.expected_total_ms is not None else float(self.base_debounce_ms)
        if self.request_time is None or now is None:
            return target
        elapsed_ms = max(0.0, (now - self.request_time) * 1000)
        return max(0.0, target - elapsed_ms)


class UserInteractionMonitor:
    """Bounded history of user actions with aggressiveness and debounce derivation."""

    def __init__(self, config: DebounceConfig | None = None, clock: Callable[[], float] = time.time):
        self.config = config or DebounceConfig()
        self._clock = clock
        # All kinds, for aggressiveness scoring
        self._actions_for_aggressiveness: deque[UserAction] = deque(maxlen=MAX_INTERACTIONS_STORED)
        # Accepts and rejects only, for debounce timing
        self._actions_for_timing: deque[UserAction] = deque(maxlen=MAX_INTERACTIONS_CONSIDERED)

    # =========================================================================
    # Recording
    # =========================================================================

    def handle_acceptance(self) -> None:
        self.record_action(UserActionKind.ACCEPTED)

    def handle_rejection(self) -> None:
        self.record_action(UserActionKind.REJECTED)

    def handle_ignored(self) -> None:
        self.record_action(UserActionKind.IGNORED)

    def record_action(self, kind: UserActionKind) -> None:
        action = UserAction(time=self._clock(), kind=kind)
        self._actions_for_aggressiveness.append(action)
        if kind != UserActionKind.IGNORED:
            self._actions_for_timing.append(action)
        logger.debug("Recorded user action %s", kind.value)

    @property
    def actions(self) -> list[UserAction]:
        """Scoring history, oldest first."""
        return list(self._actions_for_aggressiveness)

    @property
    def timing_actions(self) -> list[UserAction]:
        return list(self._actions_for_timing)

    # =========================================================================
    # Debounce
    # =========================================================================

    def create_delay_session(self, request_time: float | None = None) -> DelaySession:
        base = self.config.base_debounce_ms
        expected = self.get_expected_debounce_time(base) if self.config.backoff_debounce_enabled else None
        return DelaySession(base_debounce_ms=base, expected_total_ms=expected, request_time=request_time)

    def get_expected_debounce_time(self, base_debounce_ms: float) -> float:
        """
        Base debounce scaled by recent accepts (shorter) and rejects (longer).

        Each action within the decay window moves the multiplier toward its
        weight by ``exp(-age / 10 min)``; the effects compound. The result is
        clamped to ``[50, 3000]`` ms.
        """
        now = self._clock()
        multiplier = 1.0
        for action in self._actions_for_timing:
            age = now - action.time
            if age > DEBOUNCE_DECAY_TIME_S:
                continue
            decay = math.exp(-age / DEBOUNCE_DECAY_TIME_S)
            weight = REJECTION_WEIGHT if action.kind == UserActionKind.REJECTED else ACCEPTANCE_WEIGHT
            multiplier *= 1 + (weight - 1) * decay

        return min(MAX_DEBOUNCE_MS, max(MIN_DEBOUNCE_MS, base_debounce_ms * multiplier))

    # =========================================================================
    # Aggressiveness
    # =========================================================================

    def get_aggressiveness_level(self) -> AggressivenessLevel:
        if self.config.aggressiveness_override is not None:
            return self.config.aggressiveness_override

        happiness = self.config.happiness
        score = self.get_user_happiness_score(happiness)
        if score >= happiness.high_threshold:
            level = AggressivenessLevel.HIGH
        elif score >= happiness.medium_threshold:
            level = AggressivenessLevel.MEDIUM
        else:
            level = AggressivenessLevel.LOW
        logger.debug("Happiness score %.3f -> aggressiveness %s", score, level.value)
        return level

    def get_user_happiness_score(self, config: UserHappinessScoreConfiguration | None = None) -> float:
        """
        Value in ``[0, 1]``; 1 is a very happy user, 0.5 is neutral.

        Each action in the window is weighted by its 1-based position (most
        recent highest) and its configured score normalized between the
        rejected and accepted scores. The deviation from 0.5 is then scaled
        by ``len(window) / 10`` so few data points stay close to neutral.
        """
        config = config or self.config.happiness
        if not self._actions_for_aggressiveness:
            return NEUTRAL_SCORE

        window = self.get_window_with_ignored_limit(config)
        if not window:
            return NEUTRAL_SCORE

        spread = config.accepted_score - config.rejected_score
        scores = {
            UserActionKind.ACCEPTED: config.accepted_score,
            UserActionKind.REJECTED: config.rejected_score,
            UserActionKind.IGNORED: config.ignored_score,
        }

        weighted_score = 0.0
        total_weight = 0
        for position, action in enumerate(window, start=1):
            if action.kind == UserActionKind.IGNORED and not config.include_ignored:
                continue
            normalized = (scores[action.kind] - config.rejected_score) / spread if spread else NEUTRAL_SCORE
            weighted_score += normalized * position
            total_weight += position

        raw_score = weighted_score / total_weight if total_weight > 0 else NEUTRAL_SCORE
        confidence = len(window) / MAX_INTERACTIONS_CONSIDERED
        score = NEUTRAL_SCORE + (raw_score - NEUTRAL_SCORE) * confidence
        return min(1.0, max(0.0, score))

    def get_window_with_ignored_limit(self, config: UserHappinessScoreConfiguration | None = None) -> list[UserAction]:
        """
        The last 10 scoring actions, oldest first.

        With ignored limiting enabled, history is walked newest first and
        ignored actions past the consecutive and/or total cap are skipped,
        reaching further back to still collect 10 actions.
        """
        config = config or self.config.happiness
        if not config.limit_consecutive_ignored and not config.limit_total_ignored:
            return list(self._actions_for_aggressiveness)[-MAX_INTERACTIONS_CONSIDERED:]

        result: list[UserAction] = []
        consecutive_ignored = 0
        total_ignored = 0

        for action in reversed(self._actions_for_aggressiveness):
            if len(result) >= MAX_INTERACTIONS_CONSIDERED:
                break
            if action.kind == UserActionKind.IGNORED:
                if config.limit_consecutive_ignored and consecutive_ignored >= config.ignored_limit:
                    continue
                if config.limit_total_ignored and total_ignored >= config.ignored_limit:
                    continue
                consecutive_ignored += 1
                total_ignored += 1
            else:
                consecutive_ignored = 0
            result.append(action)

        result.reverse()
        return result
