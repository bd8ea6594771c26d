"""
Agent personalities — fixed risk profiles selected once at startup.
"""

from dataclasses import dataclass
from enum import Enum

from scout.errors import InvalidInputError


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def values(cls) -> tuple[str, ...]:
        return tuple(member.value for member in cls)


@dataclass(frozen=True)
class PersonalityProfile:
    name: str
    risk_tolerance: float  # (0, 1)
    rebalance_threshold: float
    description: str
    quote: str


class Personality(Enum):
    """Closed catalog of risk personalities, one per RiskLevel."""

    CONSERVATIVE = PersonalityProfile(
        name="Conservative Guardian",
        risk_tolerance=0.3,
        rebalance_threshold=15,
        description="Prioritizes capital preservation over yield",
        quote="Safety first, returns second. I'll protect your capital.",
    )
    BALANCED = PersonalityProfile(
        name="Balanced Strategist",
        risk_tolerance=0.6,
        rebalance_threshold=10,
        description="Balances risk and reward with measured decisions",
        quote="Opportunity favors the prepared mind. I'm always watching.",
    )
    AGGRESSIVE = PersonalityProfile(
        name="Aggressive Hunter",
        risk_tolerance=0.9,
        rebalance_threshold=5,
        description="Actively seeks maximum yield, accepts higher risk",
        quote="Fortune favors the bold. Let's find those alpha pools!",
    )

    @property
    def profile(self) -> PersonalityProfile:
        return self.value

    @property
    def risk_level(self) -> RiskLevel:
        return _LEVEL_BY_PERSONALITY[self]

    @classmethod
    def from_risk_level(cls, key) -> "Personality":
        """Map a risk-level selector (low/medium/high) to its personality.

        Unknown keys raise InvalidInputError instead of falling back to a default.
        """
        if isinstance(key, RiskLevel):
            return _PERSONALITY_BY_LEVEL[key]
        try:
            level = RiskLevel(str(key).strip().lower())
        except ValueError:
            raise InvalidInputError(
                f"Unknown risk level {key!r}; expected one of {', '.join(RiskLevel.values())}"
            ) from None
        return _PERSONALITY_BY_LEVEL[level]


_PERSONALITY_BY_LEVEL = {
    RiskLevel.LOW: Personality.CONSERVATIVE,
    RiskLevel.MEDIUM: Personality.BALANCED,
    RiskLevel.HIGH: Personality.AGGRESSIVE,
}
_LEVEL_BY_PERSONALITY = {p: level for level, p in _PERSONALITY_BY_LEVEL.items()}
