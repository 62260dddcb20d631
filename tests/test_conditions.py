from familiar.conditions import Condition, ConditionSet, derive_status, format_conditions, is_lonely
from familiar.models import ACTION_FEED, ACTION_PLAY, ACTION_VISIT, Interaction, PetConfig

T0 = 1_700_000_000.0
HOUR = 3600.0


def _visits(n, now=T0):
    return [Interaction(time=now - HOUR * (i + 1), action=ACTION_VISIT) for i in range(n)]


def test_message_outranks_stone(make_pet):
    pet = make_pet(message="hi", is_stone=True, last_visits=_visits(3))
    status = pet.status(T0)
    assert status.primary is Condition.HAS_MESSAGE
    assert status.ordered[:2] == [Condition.HAS_MESSAGE, Condition.STONE]


def test_low_health_reads_as_stone_without_flag(make_pet):
    pet = make_pet(hunger=100, happiness=5, energy=5, last_visits=_visits(3))
    status = pet.status(T0)
    assert status.health < 10
    assert status.primary is Condition.STONE


def test_infirm_from_health_only_when_enabled(make_pet):
    fields = dict(hunger=80, happiness=25, energy=25, last_visits=_visits(3))
    assert Condition.INFIRM in make_pet(**fields).status(T0).conditions
    assert Condition.INFIRM not in make_pet(PetConfig(infirm_enabled=False), **fields).status(T0).conditions
    # an existing flag counts even when the check is disabled
    flagged = make_pet(PetConfig(infirm_enabled=False), is_infirm=True, last_visits=_visits(3))
    assert Condition.INFIRM in flagged.status(T0).conditions


def test_loneliness_threshold(make_pet):
    config = PetConfig(interaction_threshold=3)
    two = make_pet(config, last_feeds=[Interaction(T0 - HOUR, ACTION_FEED)],
                   last_plays=[Interaction(T0 - 2 * HOUR, ACTION_PLAY)])
    assert is_lonely(two, T0)
    three = make_pet(config, last_visits=_visits(1), last_feeds=_visits(1), last_plays=_visits(1))
    assert not is_lonely(three, T0)


def test_old_interactions_do_not_count(make_pet):
    stale = [Interaction(time=T0 - 24 * HOUR, action=ACTION_VISIT) for _ in range(5)]
    pet = make_pet(last_visits=stale)
    assert is_lonely(pet, T0)


def test_zero_threshold_uses_default(make_pet):
    pet = make_pet(PetConfig(interaction_threshold=0), last_visits=_visits(2))
    assert is_lonely(pet, T0)


def test_asleep_hides_lonely_and_tired(make_pet):
    pet = make_pet(is_asleep=True, hunger=10, happiness=30, energy=10)
    status = pet.status(T0)
    assert status.primary is Condition.ASLEEP
    assert Condition.LONELY not in status.conditions
    assert Condition.TIRED not in status.conditions
    assert Condition.HUNGRY in status.conditions
    assert Condition.SAD in status.conditions


def test_priority_order(make_pet):
    pet = make_pet(hunger=10, happiness=30, energy=10)
    assert pet.status(T0).ordered == [Condition.LONELY, Condition.HUNGRY, Condition.TIRED, Condition.SAD]


def test_happy_when_nothing_else(make_pet):
    pet = make_pet(hunger=60, happiness=60, energy=60, last_visits=_visits(3))
    status = pet.status(T0)
    assert status.ordered == [Condition.HAPPY]
    assert status.primary is Condition.HAPPY


def test_thriving_adds_happy_alongside(make_pet):
    pet = make_pet(hunger=80, happiness=80, energy=80)
    assert pet.status(T0).ordered == [Condition.LONELY, Condition.HAPPY]


def test_derive_status_does_not_mutate(make_pet):
    pet = make_pet(message="x", hunger=10, happiness=30, energy=10)
    before = pet.state.to_dict()
    derive_status(pet, T0, pet.health())
    assert pet.state.to_dict() == before


def test_condition_set_keeps_first_insertion():
    conds = ConditionSet([Condition.SAD, Condition.LONELY, Condition.SAD])
    assert conds.ordered() == [Condition.SAD, Condition.LONELY]
    assert conds.first is Condition.SAD
    assert len(conds) == 2
    assert not ConditionSet()
    assert ConditionSet().first is None


def test_format_conditions():
    C = Condition
    assert format_conditions([]) == "happy"
    assert format_conditions([C.HAPPY]) == "happy"
    assert format_conditions([C.HAS_MESSAGE]) == "has-message"
    assert format_conditions([C.LONELY, C.HUNGRY]) == "lonely, hungry"
    assert format_conditions([C.HAS_MESSAGE, C.LONELY, C.HUNGRY]) == "lonely, hungry and has a message"
    assert format_conditions([C.STONE, C.INFIRM, C.SAD]) == "stone"
    assert format_conditions([C.HAS_MESSAGE, C.STONE, C.INFIRM]) == "stone and has a message"
    assert str(C.TIRED) == "tired"


def test_negative_threshold_is_never_lonely(make_pet):
    pet = make_pet(PetConfig(interaction_threshold=-1))
    assert not is_lonely(pet, T0)
