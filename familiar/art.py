"""Animation key selection and frame sequencing.

Nothing here draws to the terminal; ``familiar.render`` does that.
"""
from typing import Iterator, Mapping, Tuple

from familiar.conditions import Condition
from familiar.models import AnimationConfig, Frame

KEY_SEPARATOR = "+"
DEFAULT_KEY = "default"
EGG_KEY = "egg"

DEFAULT_LOOPS = 3
MAX_LOOPS = 10

# Conditions that still show through an egg
SPECIAL_CONDITIONS = (Condition.HAS_MESSAGE, Condition.STONE, Condition.ASLEEP, Condition.INFIRM)
# Order in which conditions are joined into a compound key. "happy" never is.
KEY_ORDER = (
    Condition.HAS_MESSAGE, Condition.STONE, Condition.ASLEEP, Condition.INFIRM,
    Condition.LONELY, Condition.HUNGRY, Condition.TIRED, Condition.SAD,
)

# --- Built-in art for pets without a usable animation ---
FALLBACK_ART = {
    "default": " /\\_/\\ \n( o.o )\n > ^ <",
    "infirm": " /\\_/\\ \n( x.x )\n > ^ <",
    "stone": " /\\_/\\ \n( +.+ )\n > ^ <",
    "has-message": " /\\_/\\ \n( o.o )\n > ^ <*",
    "egg": "  ______\n /  . . \\ \n \\______/",
}


def evolution_key(evolution: int, key: str) -> str:
    return f"e{evolution}:{key}"


def choose_animation_key(conditions, evolution: int, available: Mapping[str, object]) -> str:
    """Pick the best key in ``available`` for the active ``conditions``.

    Always returns something; ``"default"`` when nothing better exists.
    """
    active = set(conditions)

    if evolution == 0 and not any(c in active for c in SPECIAL_CONDITIONS):
        if EGG_KEY in available:
            return EGG_KEY

    # sleeping dominates hunger, sadness and the rest
    if Condition.ASLEEP in active:
        if evolution > 0 and evolution_key(evolution, Condition.ASLEEP.value) in available:
            return evolution_key(evolution, Condition.ASLEEP.value)
        if Condition.ASLEEP.value in available:
            return Condition.ASLEEP.value

    parts = [c.value for c in KEY_ORDER if c in active]
    key = KEY_SEPARATOR.join(parts) or DEFAULT_KEY

    if evolution > 0 and evolution_key(evolution, key) in available:
        return evolution_key(evolution, key)
    if key in available:
        return key

    for end in range(len(parts) - 1, 0, -1):
        fallback = KEY_SEPARATOR.join(parts[:end])
        if evolution > 0 and evolution_key(evolution, fallback) in available:
            return evolution_key(evolution, fallback)
        if fallback in available:
            return fallback

    return DEFAULT_KEY


def fallback_art(conditions, evolution: int) -> str:
    """Static art for when the animation table has nothing usable."""
    active = set(conditions)
    for cond in (Condition.HAS_MESSAGE, Condition.STONE, Condition.INFIRM):
        if cond in active:
            return FALLBACK_ART[cond.value]
    if evolution == 0 and Condition.ASLEEP not in active:
        return FALLBACK_ART["egg"]
    return FALLBACK_ART["default"]


def loop_count(animation: AnimationConfig) -> int:
    loops = animation.loops if animation.loops > 0 else DEFAULT_LOOPS
    return min(loops, MAX_LOOPS)


def frame_seconds(animation: AnimationConfig, frame: Frame) -> float:
    if frame.ms > 0:
        return frame.ms / 1000.0
    fps = animation.fps if animation.fps > 0 else 1
    return 1.0 / fps


def iter_frames(animation: AnimationConfig, loops=None) -> Iterator[Tuple[Frame, float]]:
    """Lazily yield ``(frame, seconds_to_show)`` for every frame of every loop."""
    if not animation.frames:
        return
    loops = loop_count(animation) if loops is None else loops
    for _ in range(loops):
        for frame in animation.frames:
            yield frame, frame_seconds(animation, frame)
