r"""Swipe-to-decide gesture for recommendation cards.

The gesture is a small state machine driven by horizontal drag deltas::

    IDLE --begin--> DRAGGING --end--> COMMITTING --finish--> IDLE
                                 \--> RESETTING  --finish--> IDLE

It describes the animation the view should run, but runs none itself.
A decision callback fires from ``finish`` once the commit animation has
completed, at most once per gesture.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

logger = logging.getLogger(__name__)

SWIPE_THRESHOLD_RATIO = 0.3
COMMIT_DURATION_MS = 300
ROTATION_DIVISOR = 20.0


class SwipeState(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    COMMITTING = "committing"
    RESETTING = "resetting"


class SwipeDecision(str, Enum):
    LIKE = "like"
    SKIP = "skip"


@dataclass(frozen=True)
class CardAnimation:
    """Animation the view layer should play to reach ``target_x``."""

    kind: str  # "timing" or "spring"
    target_x: float
    target_rotation: float
    duration_ms: Optional[int] = None


class SwipeGesture:
    """Maps a horizontal drag on a card to a like/skip decision."""

    def __init__(
        self,
        screen_width: float,
        on_like: Callable[[], None] | None = None,
        on_skip: Callable[[], None] | None = None,
        threshold_ratio: float = SWIPE_THRESHOLD_RATIO,
    ) -> None:
        if screen_width <= 0:
            raise ValueError("screen_width must be positive")
        self.screen_width = float(screen_width)
        self.threshold = self.screen_width * threshold_ratio
        self.on_like = on_like
        self.on_skip = on_skip
        self.state = SwipeState.IDLE
        self.translate_x = 0.0
        self.rotation = 0.0
        self.pending: Optional[SwipeDecision] = None
        self.animation: Optional[CardAnimation] = None

    def begin(self) -> bool:
        """Start a drag. Ignored while a commit is in flight."""

        if self.state == SwipeState.COMMITTING:
            logger.debug("Drag ignored while committing %s", self.pending)
            return False
        self.state = SwipeState.DRAGGING
        self.translate_x = 0.0
        self.rotation = 0.0
        self.animation = None
        return True

    def update(self, dx: float) -> float:
        """Follow the finger; ``dx`` is total translation since ``begin``."""

        if self.state != SwipeState.DRAGGING:
            return self.translate_x
        self.translate_x = float(dx)
        self.rotation = self.translate_x / ROTATION_DIVISOR
        return self.translate_x

    def end(self, dx: float | None = None) -> CardAnimation:
        """Release the card and decide between committing and springing back."""

        if self.state != SwipeState.DRAGGING:
            return self.animation or CardAnimation("spring", self.translate_x, self.rotation)
        if dx is not None:
            self.update(dx)

        if self.translate_x > self.threshold and self.on_like is not None:
            return self._commit(SwipeDecision.LIKE, self.screen_width)
        if self.translate_x < -self.threshold and self.on_skip is not None:
            return self._commit(SwipeDecision.SKIP, -self.screen_width)

        self.state = SwipeState.RESETTING
        self.animation = CardAnimation("spring", 0.0, 0.0)
        return self.animation

    def _commit(self, decision: SwipeDecision, target_x: float) -> CardAnimation:
        self.state = SwipeState.COMMITTING
        self.pending = decision
        self.animation = CardAnimation("timing", target_x, self.rotation, COMMIT_DURATION_MS)
        logger.debug("Committing swipe %s", decision.value)
        return self.animation

    def finish(self) -> Optional[SwipeDecision]:
        """Animation completed: settle position and fire the decision once."""

        if self.state == SwipeState.RESETTING:
            self.translate_x = 0.0
            self.rotation = 0.0
            self.state = SwipeState.IDLE
            self.animation = None
            return None
        if self.state != SwipeState.COMMITTING:
            return None

        decision = self.pending
        self.translate_x = self.animation.target_x if self.animation else self.translate_x
        self.pending = None
        self.animation = None
        self.state = SwipeState.IDLE
        callback = self.on_like if decision == SwipeDecision.LIKE else self.on_skip
        if callback is not None:
            callback()
        return decision

    def reset(self) -> None:
        """Recentre for the next card."""

        self.state = SwipeState.IDLE
        self.translate_x = 0.0
        self.rotation = 0.0
        self.pending = None
        self.animation = None


__all__ = [
    "SWIPE_THRESHOLD_RATIO",
    "COMMIT_DURATION_MS",
    "SwipeState",
    "SwipeDecision",
    "CardAnimation",
    "SwipeGesture",
]
