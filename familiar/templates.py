"""Built-in pet types used by ``summon``."""
from dataclasses import replace

from familiar.models import PetConfig, PetState

DEFAULT_PET_TYPE = "cat"

FAMILIAR_NAMES = ["Pip", "Shadow", "Whisper", "Ember", "Spark", "Echo"]


def _inline(*arts, fps=1, loops=0):
    return {"source": "inline", "fps": fps, "loops": loops, "frames": [{"art": a} for a in arts]}


CAT_ANIMATIONS = {
    "egg": _inline("  ______\n /  . . \\ \n \\______/"),
    "default": _inline(" /\\_/\\ \n( o.o )\n > ^ <"),
    "has-message": _inline(" /\\_/\\ \n( o.o )\n > ^ <*"),
    "stone": _inline(" /\\_/\\ \n( +.+ )\n > ^ <"),
    "infirm": _inline(" /\\_/\\ \n( x.x )\n > ^ <"),
    "asleep": _inline(" /\\_/\\  z\n( -.- )z\n > ^ <"),
    "lonely": _inline(" /\\_/\\ \n( ;.; )\n > ^ <  ?"),
    "hungry": _inline(" /\\_/\\ \n( o.O )\n > ^ < ~food~"),
    "tired": _inline(" /\\_/\\ \n( =.= )\n > ^ <"),
    "sad": _inline(" /\\_/\\ \n( T.T )\n > ^ <"),
    "lonely+hungry": _inline(" /\\_/\\ \n( ;.O )\n > ^ < ~food?~"),
    "e2:default": _inline("  /\\_/\\  \n ( ^.^ ) \n/ > ^ < \\"),
}

DANCER_ANIMATIONS = {
    "egg": _inline("  ___  \n /   \\ \n \\___/", "  ___  \n / ~ \\ \n \\___/", fps=2),
    "default": _inline("   o   \n  /|\\  \n  / \\  ", "  \\o/  \n   |   \n  / \\  ", "   o/  \n  /|   \n  / \\  ", fps=3, loops=2),
    "asleep": _inline("   o  z\n  /|\\ \n  / \\ ", "   o Zz\n  /|\\ \n  / \\ ", fps=1),
    "sad": _inline("   o   \n  /|\\  \n  | |  "),
    "stone": _inline("   #   \n  /#\\  \n  # #  "),
}

T = ""  # transparent
W = "#ffffff"
K = "#222222"
O = "#f5a623"
PIXEL_ANIMATIONS = {
    "default": {"source": "pixel", "fps": 2, "loops": 0, "frames": [
        {"pixels": [[O, T, T, O], [O, O, O, O], [O, K, K, O], [O, O, O, O]]},
        {"pixels": [[O, T, T, O], [O, O, O, O], [O, W, W, O], [O, O, O, O]], "ms": 200},
    ]},
    "egg": {"source": "pixel", "fps": 1, "loops": 0, "frames": [
        {"pixels": [[T, W, W, T], [W, W, W, W], [W, W, W, W], [T, W, W, T]]},
    ]},
}

TEMPLATES = {
    "cat": {"allowAnsiAnimations": False, "animations": CAT_ANIMATIONS},
    "dancer": {"allowAnsiAnimations": True, "animations": DANCER_ANIMATIONS},
    "pixel": {"allowAnsiAnimations": True, "animations": PIXEL_ANIMATIONS},
}


def available_types():
    return sorted(TEMPLATES)


def template_config(pet_type: str, name: str, created_at: float) -> PetConfig:
    """Config for a freshly summoned pet. Raises KeyError for unknown types."""
    data = dict(TEMPLATES[pet_type])
    data.update({"name": name, "petType": pet_type, "createdAt": created_at})
    return PetConfig.from_dict(data)


def template_state(config_ref: str, now: float) -> PetState:
    state = PetState(config_ref=config_ref, hunger=10, happiness=80, energy=80, evolution=0)
    state.last_checked = now
    return state


def merge_config(existing: PetConfig, template: PetConfig) -> PetConfig:
    """Bring ``existing`` up to date with ``template``.

    Animations and the format version come from the template. Everything the
    owner may have tuned (name, decay rates, thresholds, sleep, health mode,
    animation preference) is kept. The pet type follows the template.
    """
    return replace(existing, version=template.version, pet_type=template.pet_type or existing.pet_type,
                   animations=template.animations)
