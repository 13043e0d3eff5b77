"""
Signal Aggregator

Combines a panel's indicator readings into one directional decision using
count-based agreement: a direction needs more votes than the opposite side
and at least `min_agreement` votes. Ties never trade.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from src.indicators.base_indicator import IndicatorReading, Signal

logger = logging.getLogger(__name__)


class Direction(str, Enum):
    """Decision direction."""

    LONG = "LONG"
    SHORT = "SHORT"
    NONE = "NONE"


@dataclass(frozen=True)
class SignalDecision:
    """Result of signal aggregation."""

    direction: Direction
    # number of indicators voting for the winning side
    strength: int
    # 0..100, share of non-HOLD votes on the winning side
    confidence: int
    # readings voting with the direction (all voting readings for NONE)
    contributing_indicators: tuple[IndicatorReading, ...] = field(default_factory=tuple)
    buy_count: int = 0
    sell_count: int = 0
    # informational: sum of BUY weights minus sum of SELL weights
    weighted_score: float = 0.0
    # direction != NONE and confidence >= min_confidence
    accepted: bool = False

    @property
    def is_actionable(self) -> bool:
        return self.accepted and self.direction is not Direction.NONE

    def to_record(self) -> dict[str, Any]:
        return {
            "direction": self.direction.value,
            "strength": self.strength,
            "confidence": self.confidence,
            "buy_count": self.buy_count,
            "sell_count": self.sell_count,
            "weighted_score": self.weighted_score,
            "accepted": self.accepted,
            "indicators": [r.name for r in self.contributing_indicators],
        }


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class SignalAggregator:
    """
    Turn indicator votes into a LONG / SHORT / NONE decision.

    Only readings with weight > 0 vote. Weights do not scale votes; they only
    switch an indicator on or off and feed the informational weighted score,
    so one heavy indicator cannot overrule a majority.
    """

    def __init__(self, min_agreement: int = 3, min_confidence: float = 70.0):
        if min_agreement < 1:
            raise ValueError("min_agreement must be >= 1")
        if not 0 <= min_confidence <= 100:
            raise ValueError("min_confidence must be within [0, 100]")
        self.min_agreement = min_agreement
        self.min_confidence = min_confidence

    def decide(
        self,
        readings: Sequence[IndicatorReading],
        min_agreement: int | None = None,
        min_confidence: float | None = None,
    ) -> SignalDecision:
        """
        Aggregate readings into one decision.

        Args:
            readings: Panel output
            min_agreement: Votes required on the winning side (default: instance)
            min_confidence: Confidence floor for acceptance (default: instance)

        Returns:
            SignalDecision. A LONG/SHORT decision below the confidence floor is
            returned with accepted=False and must be treated as NONE.
        """
        min_agreement = self.min_agreement if min_agreement is None else min_agreement
        min_confidence = self.min_confidence if min_confidence is None else min_confidence

        voting = [r for r in readings if r.weight > 0 and r.signal is not Signal.HOLD]
        buys = [r for r in voting if r.signal is Signal.BUY]
        sells = [r for r in voting if r.signal is Signal.SELL]
        b, s = len(buys), len(sells)

        if b > s and b >= min_agreement:
            direction, contributing = Direction.LONG, buys
        elif s > b and s >= min_agreement:
            direction, contributing = Direction.SHORT, sells
        else:
            direction, contributing = Direction.NONE, voting

        total = b + s
        confidence = _round_half_up(100 * max(b, s) / total) if total > 0 else 0
        weighted = sum(r.weight for r in buys) - sum(r.weight for r in sells)

        accepted = direction is not Direction.NONE and confidence >= min_confidence
        if direction is not Direction.NONE and not accepted:
            logger.info(
                f"Signal rejected: {direction.value} confidence {confidence} "
                f"< {min_confidence}"
            )

        return SignalDecision(
            direction=direction,
            strength=max(b, s),
            confidence=confidence,
            contributing_indicators=tuple(contributing),
            buy_count=b,
            sell_count=s,
            weighted_score=weighted,
            accepted=accepted,
        )

    @staticmethod
    def get_top_contributors(
        decision: SignalDecision,
        top_n: int = 3,
    ) -> list[tuple[str, float]]:
        """
        Get the heaviest indicators behind a decision.

        Returns:
            [(indicator_name, weight), ...] sorted by weight desc.
        """
        items = [(r.name, r.weight) for r in decision.contributing_indicators]
        return sorted(items, key=lambda x: x[1], reverse=True)[:top_n]
