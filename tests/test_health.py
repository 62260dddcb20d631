from familiar.health import HEALTH_AVERAGE, HEALTH_WEIGHTED, clamp, compute_health


def test_average_inverts_hunger():
    assert compute_health(10, 80, 80, HEALTH_AVERAGE) == 83
    assert compute_health(100, 0, 0, HEALTH_AVERAGE) == 0
    assert compute_health(0, 100, 100, HEALTH_AVERAGE) == 100


def test_weighted_favours_happiness():
    # satisfaction 0, happiness 100, energy 0
    assert compute_health(100, 100, 0, HEALTH_AVERAGE) == 33
    assert compute_health(100, 100, 0, HEALTH_WEIGHTED) == 40


def test_unknown_mode_falls_back_to_average():
    assert compute_health(10, 80, 80, "median") == compute_health(10, 80, 80, HEALTH_AVERAGE)


def test_health_always_in_range():
    for mode in (HEALTH_AVERAGE, HEALTH_WEIGHTED):
        for hunger in range(0, 101, 10):
            for happiness in range(0, 101, 10):
                for energy in range(0, 101, 10):
                    assert 0 <= compute_health(hunger, happiness, energy, mode) <= 100


def test_out_of_range_vitals_are_clamped():
    assert compute_health(-50, 150, 150) == 100
    assert compute_health(200, -10, -10) == 0


def test_clamp():
    assert clamp(-3) == 0
    assert clamp(130) == 100
    assert clamp(0.7, 0.0, 0.5) == 0.5
