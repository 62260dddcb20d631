from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator, List

from familiar import interactions

INFIRM_HEALTH_THRESHOLD = 30
HUNGRY_BELOW = 50
TIRED_BELOW = 40
SAD_BELOW = 50
THRIVING_ABOVE = 70


class Condition(str, Enum):
    HAS_MESSAGE = "has-message"
    STONE = "stone"
    INFIRM = "infirm"
    ASLEEP = "asleep"
    LONELY = "lonely"
    HUNGRY = "hungry"
    TIRED = "tired"
    SAD = "sad"
    HAPPY = "happy"

    def __str__(self):
        return self.value


class ConditionSet:
    """Insertion-ordered set of conditions. The first member is the primary one."""

    def __init__(self, conditions: Iterable[Condition] = ()):
        self._items: List[Condition] = []
        for cond in conditions:
            self.add(cond)

    def add(self, cond: Condition):
        if cond not in self._items:
            self._items.append(cond)

    def __contains__(self, cond):
        return cond in self._items

    def __iter__(self) -> Iterator[Condition]:
        return iter(self._items)

    def __len__(self):
        return len(self._items)

    def __bool__(self):
        return bool(self._items)

    def __repr__(self):
        return f"ConditionSet({[c.value for c in self._items]})"

    @property
    def first(self):
        return self._items[0] if self._items else None

    def ordered(self) -> List[Condition]:
        return list(self._items)


@dataclass
class DerivedStatus:
    health: int
    conditions: ConditionSet = field(default_factory=ConditionSet)
    primary: Condition = Condition.HAPPY

    @property
    def ordered(self) -> List[Condition]:
        return self.conditions.ordered()


def is_lonely(pet, now: float) -> bool:
    return interactions.count_recent(pet.state, now) < pet.config.loneliness_threshold


def derive_status(pet, now: float, health: int) -> DerivedStatus:
    """Turn vitals, flags and interaction history into prioritized conditions. Pure."""
    state, config = pet.state, pet.config
    conds = ConditionSet()

    if state.message:
        conds.add(Condition.HAS_MESSAGE)
    if state.is_stone or health < config.stone_threshold:
        conds.add(Condition.STONE)
    if state.is_infirm or (health < INFIRM_HEALTH_THRESHOLD and config.infirm_enabled):
        conds.add(Condition.INFIRM)
    if state.is_asleep:
        conds.add(Condition.ASLEEP)
    # a sleeping pet is never lonely or tired
    if not state.is_asleep and is_lonely(pet, now):
        conds.add(Condition.LONELY)
    # NOTE: literal thresholds, hunger itself is inverted (0 = full)
    if state.hunger < HUNGRY_BELOW:
        conds.add(Condition.HUNGRY)
    if not state.is_asleep and state.energy < TIRED_BELOW:
        conds.add(Condition.TIRED)
    if state.happiness < SAD_BELOW:
        conds.add(Condition.SAD)
    thriving = state.hunger > THRIVING_ABOVE and state.happiness > THRIVING_ABOVE and state.energy > THRIVING_ABOVE
    if not conds or thriving:
        conds.add(Condition.HAPPY)

    return DerivedStatus(health=health, conditions=conds, primary=conds.first or Condition.HAPPY)


def format_conditions(ordered: Iterable[Condition]) -> str:
    """Human summary of an ordered condition list ("lonely, hungry and has a message")."""
    ordered = list(ordered or [])
    if not ordered:
        return Condition.HAPPY.value
    has_message = Condition.HAS_MESSAGE in ordered
    rest = [c for c in ordered if c is not Condition.HAS_MESSAGE]
    if not rest:
        return Condition.HAS_MESSAGE.value
    if Condition.STONE in rest:
        text = Condition.STONE.value
    else:
        text = ", ".join(c.value for c in rest)
    if has_message:
        text += " and has a message"
    return text
