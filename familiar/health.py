"""Health score derived from the three vitals."""

HEALTH_AVERAGE = "average"
HEALTH_WEIGHTED = "weighted"

# satisfaction, happiness, energy
WEIGHTS = (0.3, 0.4, 0.3)


def clamp(value, low=0, high=100):
    return max(low, min(high, value))


def compute_health(hunger: int, happiness: int, energy: int, mode: str = HEALTH_AVERAGE) -> int:
    """Combine the vitals into a single 0-100 score.

    Hunger is inverted (0 = full), so it is turned into a satisfaction
    score first. Unknown modes are treated as ``average``.
    """
    satisfaction = 100 - hunger
    if mode == HEALTH_WEIGHTED:
        w_sat, w_happy, w_energy = WEIGHTS
        health = int(satisfaction * w_sat + happiness * w_happy + energy * w_energy)
    else:
        health = (satisfaction + happiness + energy) // 3
    return clamp(health)
