import re
from dataclasses import dataclass, field
from typing import Dict, List

from familiar.health import HEALTH_AVERAGE

# --- Defaults ---
DEFAULT_DECAY_RATE = 1.0
DEFAULT_HUNGER_DECAY_PER_HOUR = 2.0
DEFAULT_HAPPINESS_DECAY_PER_HOUR = 1.5
DEFAULT_ENERGY_DECAY_PER_HOUR = 1.0
DEFAULT_STONE_THRESHOLD = 10
DEFAULT_INFIRM_DECAY_MULTIPLIER = 1.5
DEFAULT_STONE_DECAY_MULTIPLIER = 0.1
DEFAULT_SLEEP_DURATION_SECONDS = 30 * 60
DEFAULT_INTERACTION_THRESHOLD = 3

# Interaction kinds
ACTION_VISIT = "visit"
ACTION_FEED = "feed"
ACTION_PLAY = "play"
ACTIONS = (ACTION_VISIT, ACTION_FEED, ACTION_PLAY)

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|h|m|s)")
_DURATION_UNITS = {"h": 3600.0, "m": 60.0, "s": 1.0, "ms": 0.001}


def parse_duration(value, default=DEFAULT_SLEEP_DURATION_SECONDS) -> float:
    """Seconds from a number or a duration string such as "30m" or "1h30m".

    Anything unparseable (or non-positive) gives back ``default``.
    """
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, (int, float)):
        return float(value) if value > 0 else default
    text = str(value).strip().replace(" ", "")
    if not text:
        return default
    try:
        seconds = float(text)
        return seconds if seconds > 0 else default
    except ValueError:
        pass
    parts = _DURATION_PART.findall(text)
    if not parts or "".join(n + u for n, u in parts) != text:
        return default
    seconds = sum(float(n) * _DURATION_UNITS[u] for n, u in parts)
    return seconds if seconds > 0 else default


def format_duration(seconds: float) -> str:
    seconds = int(seconds)
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    out = ""
    if hours: out += f"{hours}h"
    if minutes: out += f"{minutes}m"
    if secs or not out: out += f"{secs}s"
    return out


def _num(data, key, default, cast=float):
    """``cast(data[key])``, or ``default`` when the key is missing, null or not a number."""
    try:
        return cast(data.get(key, default))
    except (TypeError, ValueError):
        return default


def _flag(data, key, default):
    value = data.get(key)
    return default if value is None else bool(value)


@dataclass
class Frame:
    art: str = ""
    pixels: List[List[str]] = field(default_factory=list)
    ms: int = 0

    def to_dict(self):
        data = {}
        if self.art: data["art"] = self.art
        if self.pixels: data["pixels"] = self.pixels
        if self.ms: data["ms"] = self.ms
        return data

    @classmethod
    def from_dict(cls, data):
        return cls(art=data.get("art") or "", pixels=data.get("pixels") or [], ms=_num(data, "ms", 0, int))


@dataclass
class AnimationConfig:
    source: str = "inline"  # "inline" | "pixel"
    fps: int = 1
    loops: int = 0  # 0 or negative = default loop count
    frames: List[Frame] = field(default_factory=list)

    @property
    def is_pixel(self):
        return self.source == "pixel"

    def to_dict(self):
        return {"source": self.source, "fps": self.fps, "loops": self.loops, "frames": [f.to_dict() for f in self.frames]}

    @classmethod
    def from_dict(cls, data):
        return cls(
            source=data.get("source") or "inline",
            fps=_num(data, "fps", 1, int),
            loops=_num(data, "loops", 0, int),
            frames=[Frame.from_dict(f) for f in data.get("frames") or []],
        )


@dataclass
class PetConfig:
    """Per-pet tuning. Loaded once per invocation and never written back by the engine."""
    version: str = "v1"
    name: str = "Pip"
    pet_type: str = "cat"
    created_at: float = 0.0
    decay_enabled: bool = True
    decay_rate: float = DEFAULT_DECAY_RATE
    hunger_decay_per_hour: float = DEFAULT_HUNGER_DECAY_PER_HOUR
    happiness_decay_per_hour: float = DEFAULT_HAPPINESS_DECAY_PER_HOUR
    energy_decay_per_hour: float = DEFAULT_ENERGY_DECAY_PER_HOUR
    stone_threshold: int = DEFAULT_STONE_THRESHOLD
    infirm_enabled: bool = True
    infirm_decay_multiplier: float = DEFAULT_INFIRM_DECAY_MULTIPLIER
    stone_decay_multiplier: float = DEFAULT_STONE_DECAY_MULTIPLIER
    sleep_duration: float = DEFAULT_SLEEP_DURATION_SECONDS  # seconds
    health_computation: str = HEALTH_AVERAGE
    interaction_threshold: int = DEFAULT_INTERACTION_THRESHOLD
    allow_ansi_animations: bool = False
    animations: Dict[str, AnimationConfig] = field(default_factory=dict)

    @property
    def sleep_hours(self):
        seconds = self.sleep_duration if self.sleep_duration > 0 else DEFAULT_SLEEP_DURATION_SECONDS
        return seconds / 3600.0

    @property
    def loneliness_threshold(self):
        return self.interaction_threshold if self.interaction_threshold != 0 else DEFAULT_INTERACTION_THRESHOLD

    def to_dict(self):
        return {
            "version": self.version, "name": self.name, "petType": self.pet_type, "createdAt": self.created_at,
            "decayEnabled": self.decay_enabled, "decayRate": self.decay_rate,
            "hungerDecayPerHour": self.hunger_decay_per_hour, "happinessDecayPerHour": self.happiness_decay_per_hour,
            "energyDecayPerHour": self.energy_decay_per_hour, "stoneThreshold": self.stone_threshold,
            "infirmEnabled": self.infirm_enabled, "infirmDecayMultiplier": self.infirm_decay_multiplier,
            "stoneDecayMultiplier": self.stone_decay_multiplier, "sleepDuration": format_duration(self.sleep_duration),
            "healthComputation": self.health_computation, "interactionThreshold": self.interaction_threshold,
            "allowAnsiAnimations": self.allow_ansi_animations,
            "animations": {key: anim.to_dict() for key, anim in self.animations.items()},
        }

    @classmethod
    def from_dict(cls, data):
        config = cls()
        config.version = data.get("version") or "v1"; config.name = data.get("name") or config.name
        config.pet_type = data.get("petType") or "cat"; config.created_at = _num(data, "createdAt", 0.0)
        config.decay_enabled = _flag(data, "decayEnabled", True)
        config.decay_rate = _num(data, "decayRate", DEFAULT_DECAY_RATE)
        config.hunger_decay_per_hour = _num(data, "hungerDecayPerHour", DEFAULT_HUNGER_DECAY_PER_HOUR)
        config.happiness_decay_per_hour = _num(data, "happinessDecayPerHour", DEFAULT_HAPPINESS_DECAY_PER_HOUR)
        config.energy_decay_per_hour = _num(data, "energyDecayPerHour", DEFAULT_ENERGY_DECAY_PER_HOUR)
        config.stone_threshold = _num(data, "stoneThreshold", DEFAULT_STONE_THRESHOLD, int)
        config.infirm_enabled = _flag(data, "infirmEnabled", True)
        config.infirm_decay_multiplier = _num(data, "infirmDecayMultiplier", DEFAULT_INFIRM_DECAY_MULTIPLIER)
        config.stone_decay_multiplier = _num(data, "stoneDecayMultiplier", DEFAULT_STONE_DECAY_MULTIPLIER)
        config.sleep_duration = parse_duration(data.get("sleepDuration"))
        config.health_computation = data.get("healthComputation") or HEALTH_AVERAGE
        config.interaction_threshold = _num(data, "interactionThreshold", DEFAULT_INTERACTION_THRESHOLD, int)
        config.allow_ansi_animations = _flag(data, "allowAnsiAnimations", False)
        config.animations = {key: AnimationConfig.from_dict(anim) for key, anim in (data.get("animations") or {}).items()}
        return config


@dataclass
class Interaction:
    time: float
    action: str

    def to_dict(self):
        return {"time": self.time, "action": self.action}

    @classmethod
    def from_dict(cls, data):
        return cls(time=_num(data, "time", 0.0), action=data.get("action") or ACTION_VISIT)


@dataclass
class PetState:
    config_ref: str = ""
    name_override: str = ""
    hunger: int = 10  # 0 = full, 100 = starving
    happiness: int = 80
    energy: int = 80
    evolution: int = 0
    is_infirm: bool = False
    is_stone: bool = False
    is_asleep: bool = False
    sleep_until: float = 0.0
    sleep_attempts: int = 0
    message: str = ""
    last_fed: float = 0.0
    last_played: float = 0.0
    last_visited: float = 0.0
    last_checked: float = 0.0
    last_visits: List[Interaction] = field(default_factory=list)
    last_feeds: List[Interaction] = field(default_factory=list)
    last_plays: List[Interaction] = field(default_factory=list)

    def to_dict(self):
        return {
            "configRef": self.config_ref, "nameOverride": self.name_override,
            "hunger": self.hunger, "happiness": self.happiness, "energy": self.energy, "evolution": self.evolution,
            "isInfirm": self.is_infirm, "isStone": self.is_stone,
            "isAsleep": self.is_asleep, "sleepUntil": self.sleep_until, "sleepAttempts": self.sleep_attempts,
            "message": self.message,
            "lastFed": self.last_fed, "lastPlayed": self.last_played, "lastVisited": self.last_visited,
            "lastChecked": self.last_checked,
            "lastVisits": [i.to_dict() for i in self.last_visits],
            "lastFeeds": [i.to_dict() for i in self.last_feeds],
            "lastPlays": [i.to_dict() for i in self.last_plays],
        }

    @classmethod
    def from_dict(cls, data):
        state = cls()
        state.config_ref = data.get("configRef") or ""; state.name_override = data.get("nameOverride") or ""
        state.hunger = _num(data, "hunger", 10, int); state.happiness = _num(data, "happiness", 80, int)
        state.energy = _num(data, "energy", 80, int); state.evolution = _num(data, "evolution", 0, int)
        state.is_infirm = _flag(data, "isInfirm", False); state.is_stone = _flag(data, "isStone", False)
        state.is_asleep = _flag(data, "isAsleep", False); state.sleep_until = _num(data, "sleepUntil", 0.0)
        state.sleep_attempts = _num(data, "sleepAttempts", 0, int); state.message = data.get("message") or ""
        state.last_fed = _num(data, "lastFed", 0.0); state.last_played = _num(data, "lastPlayed", 0.0)
        state.last_visited = _num(data, "lastVisited", 0.0)
        state.last_checked = _num(data, "lastChecked", 0.0)
        state.last_visits = [Interaction.from_dict(i) for i in data.get("lastVisits") or []]
        state.last_feeds = [Interaction.from_dict(i) for i in data.get("lastFeeds") or []]
        state.last_plays = [Interaction.from_dict(i) for i in data.get("lastPlays") or []]
        return state
