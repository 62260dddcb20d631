"""Lazy decay: collapse the time since the last checkpoint into one update.

There is no background ticking. Every invocation measures how long it has
been since ``last_checked`` and applies the whole interval at once, so an
interval that spans the end of a nap is split into a sleeping part and an
awake part.
"""
import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Tuple

from familiar.health import clamp, compute_health
from familiar.models import PetConfig

logger = logging.getLogger(__name__)

SECONDS_PER_HOUR = 3600.0
SLEEP_HUNGER_FACTOR = 0.1  # hunger grows at 10% of the normal rate while asleep
INFIRM_RECOVERY_HEALTH = 50


class SleepPhase(Enum):
    AWAKE = auto()
    ASLEEP = auto()


@dataclass(frozen=True)
class VitalDeltas:
    hunger: float = 0.0
    happiness: float = 0.0
    energy: float = 0.0
    sleep_hours: float = 0.0
    awake_hours: float = 0.0


def decay_multiplier(config: PetConfig, is_infirm: bool, is_stone: bool) -> float:
    mult = config.decay_rate
    if is_infirm:
        mult *= config.infirm_decay_multiplier
    if is_stone:
        mult *= config.stone_decay_multiplier
    return mult


def transition(phase: SleepPhase, elapsed_hours: float, hours_until_wake: Optional[float],
               config: PetConfig, multiplier: float) -> Tuple[SleepPhase, VitalDeltas]:
    """Pure step of the sleep state machine.

    ``hours_until_wake`` is measured from the start of the window and only
    matters in the ASLEEP phase. Returns the phase at the end of the window
    and the (unclamped) changes to apply to the vitals.
    """
    sleep_hours = 0.0
    next_phase = phase
    if phase is SleepPhase.ASLEEP:
        wake_at = hours_until_wake if hours_until_wake is not None else 0.0
        if elapsed_hours > wake_at:
            sleep_hours = clamp(wake_at, 0.0, elapsed_hours)
            next_phase = SleepPhase.AWAKE
        else:
            sleep_hours = elapsed_hours
    awake_hours = elapsed_hours - sleep_hours

    hunger_rate = config.hunger_decay_per_hour * multiplier
    hunger = awake_hours * hunger_rate + sleep_hours * hunger_rate * SLEEP_HUNGER_FACTOR
    happiness = -awake_hours * config.happiness_decay_per_hour * multiplier
    energy = -awake_hours * config.energy_decay_per_hour * multiplier
    if sleep_hours > 0:
        # a full nap takes a pet from 0 to 100
        restore_rate = 100.0 / config.sleep_hours
        happiness += sleep_hours * restore_rate
        energy += sleep_hours * restore_rate

    return next_phase, VitalDeltas(hunger, happiness, energy, sleep_hours, awake_hours)


def apply_time_step(pet, now: float):
    """Advance ``pet`` to ``now``. Mutates ``pet.state`` in place and never raises."""
    state, config = pet.state, pet.config

    if not state.last_checked:
        state.last_checked = now
        return

    elapsed_hours = (now - state.last_checked) / SECONDS_PER_HOUR
    if not config.decay_enabled or elapsed_hours <= 0:
        state.last_checked = now
        return

    phase = SleepPhase.ASLEEP if state.is_asleep else SleepPhase.AWAKE
    hours_until_wake = None
    if state.is_asleep:
        hours_until_wake = (state.sleep_until - state.last_checked) / SECONDS_PER_HOUR

    mult = decay_multiplier(config, state.is_infirm, state.is_stone)
    next_phase, deltas = transition(phase, elapsed_hours, hours_until_wake, config, mult)
    logger.debug("decay over %.3fh (asleep %.3fh, x%.2f): %s", elapsed_hours, deltas.sleep_hours, mult, deltas)

    if phase is SleepPhase.ASLEEP and next_phase is SleepPhase.AWAKE:
        state.is_asleep = False; state.sleep_until = 0.0; state.sleep_attempts = 0
        logger.info("sleep ended after %.2fh", deltas.sleep_hours)

    state.hunger = clamp(int(state.hunger + deltas.hunger))
    state.happiness = clamp(int(state.happiness + deltas.happiness))
    state.energy = clamp(int(state.energy + deltas.energy))

    health = compute_health(state.hunger, state.happiness, state.energy, config.health_computation)

    if health < config.stone_threshold and not state.is_stone:
        state.is_stone = True
        logger.info("health %d fell below stone threshold %d", health, config.stone_threshold)

    # decay never sets infirm, it only lifts it
    if state.is_infirm and health >= INFIRM_RECOVERY_HEALTH:
        state.is_infirm = False
        logger.info("health %d: infirm cleared", health)

    state.last_checked = now
