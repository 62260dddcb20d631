import logging

from rich.markup import escape

from familiar import interactions
from familiar.conditions import derive_status, format_conditions
from familiar.health import clamp, compute_health
from familiar.models import ACTION_FEED, ACTION_PLAY, ACTION_VISIT, PetConfig, PetState, format_duration

logger = logging.getLogger(__name__)

# --- Interaction effects ---
FEED_HUNGER_DROP = 20
FEED_HAPPINESS_GAIN = 10
PLAY_HAPPINESS_GAIN = 15
PLAY_ENERGY_COST = 10
HEAL_BOOST = 3
SMALL_BOOST = 5
AWAKEN_HEALTH_MARGIN = 10
WAKE_ON_ATTEMPT = 3

STONE_REFUSAL = "your familiar is stone. Use 'awaken' first"


class Pet:
    """A config plus its persisted state, and the commands that change it.

    Commands return ``(message, changed)`` where ``message`` carries rich
    markup. They take ``now`` explicitly and never read the clock.
    """

    def __init__(self, config: PetConfig = None, state: PetState = None):
        self.config = config if config is not None else PetConfig()
        self.state = state if state is not None else PetState()

    @property
    def name(self):
        return self.state.name_override or self.config.name

    @property
    def display_name(self):
        """Name safe to embed in rich markup."""
        return escape(self.name)

    def health(self) -> int:
        s = self.state
        return compute_health(s.hunger, s.happiness, s.energy, self.config.health_computation)

    def status(self, now: float):
        return derive_status(self, now, self.health())

    def is_stone_now(self):
        return self.state.is_stone or self.health() < self.config.stone_threshold

    # --- Sleep handling shared by feed and play ---
    def _disturb_sleep(self):
        """Returns a message when the pet sleeps through this attempt, else None."""
        if not self.state.is_asleep:
            return None
        self.state.sleep_attempts += 1
        if self.state.sleep_attempts == 1:
            return f"[purple]{self.display_name} is asleep[/purple]"
        if self.state.sleep_attempts < WAKE_ON_ATTEMPT:
            return f"[purple]{self.display_name} is still asleep[/purple]"
        self._clear_sleep()
        logger.info("%s woken after %d attempts", self.name, WAKE_ON_ATTEMPT)
        return None

    def _clear_sleep(self):
        self.state.is_asleep = False; self.state.sleep_until = 0.0; self.state.sleep_attempts = 0

    def _hatch(self):
        if self.state.evolution == 0:
            self.state.evolution = 1
            logger.info("%s hatched", self.name)

    def feed(self, now: float):
        was_asleep = self.state.is_asleep
        sleeping = self._disturb_sleep()
        if sleeping: return sleeping, True
        if self.state.is_stone: return f"[red]{STONE_REFUSAL}[/red]", was_asleep
        self._hatch()
        self.state.hunger = clamp(self.state.hunger - FEED_HUNGER_DROP)
        self.state.happiness = clamp(self.state.happiness + FEED_HAPPINESS_GAIN)
        interactions.record_interaction(self.state, ACTION_FEED, now)
        msg = "Fed your familiar!"
        if was_asleep: msg = f"[purple]{self.display_name} wakes up![/purple]\n" + msg
        return msg, True

    def play(self, now: float):
        was_asleep = self.state.is_asleep
        sleeping = self._disturb_sleep()
        if sleeping: return sleeping, True
        if self.state.is_stone: return f"[red]{STONE_REFUSAL}[/red]", was_asleep
        self._hatch()
        self.state.happiness = clamp(self.state.happiness + PLAY_HAPPINESS_GAIN)
        self.state.energy = clamp(self.state.energy - PLAY_ENERGY_COST)
        interactions.record_interaction(self.state, ACTION_PLAY, now)
        msg = "Played with your familiar!"
        if was_asleep: msg = f"[purple]{self.display_name} wakes up![/purple]\n" + msg
        return msg, True

    def visit(self, now: float):
        interactions.record_interaction(self.state, ACTION_VISIT, now)
        return None, True

    def rest(self, now: float):
        if self.state.is_asleep: return f"[yellow]{self.display_name} is already asleep[/yellow]", False
        if self.state.is_stone: return f"[red]{STONE_REFUSAL}[/red]", False
        duration = self.config.sleep_hours * 3600.0
        self.state.is_asleep = True; self.state.sleep_until = now + duration; self.state.sleep_attempts = 0
        return f"[purple]{self.display_name} has fallen asleep (will wake in {format_duration(duration)})[/purple]", True

    def heal(self):
        self.state.energy = clamp(self.state.energy + HEAL_BOOST)
        self.state.happiness = clamp(self.state.happiness + HEAL_BOOST)
        self.state.is_infirm = False
        return f"[green]{self.display_name} has been healed[/green]", True

    def set_message(self, text: str):
        self.state.message = text
        return f"Message set: {escape(text)}", True

    def status_boost(self):
        """Small lift given by every status check, applied before decay."""
        self._boost(SMALL_BOOST)

    def _boost(self, amount):
        self.state.hunger = clamp(self.state.hunger - amount)
        self.state.happiness = clamp(self.state.happiness + amount)
        self.state.energy = clamp(self.state.energy + amount)

    def acknowledge(self):
        if self.state.message:
            self.state.message = ""
            self.state.hunger = 0; self.state.happiness = 100; self.state.energy = 100
        else:
            self._boost(SMALL_BOOST)
        return f"{self.display_name} feels acknowledged", True

    def awaken(self, now: float):
        stone = self.is_stone_now()
        asleep = self.state.is_asleep
        if not stone and not asleep:
            current = format_conditions(self.status(now).ordered)
            return f"[red]your familiar is not stone or asleep. It is {current}[/red]", False
        lines = []
        if stone:
            self.state.is_stone = False
            # equal vitals give the same health in both computation modes
            target = min(100, self.config.stone_threshold + AWAKEN_HEALTH_MARGIN)
            self.state.hunger = 100 - target; self.state.happiness = target; self.state.energy = target
            lines.append(f"[green]{self.display_name} has awakened from stone![/green]")
        if asleep:
            self._clear_sleep()
            lines.append(f"[green]{self.display_name} has awakened from sleep![/green]")
        return "\n".join(lines), True

    def ossify(self):
        if self.state.is_stone: return "[red]your familiar is already stone[/red]", False
        self.state.is_stone = True
        self._clear_sleep()
        return f"[bright_black]{self.display_name} has turned to stone[/bright_black]", True
