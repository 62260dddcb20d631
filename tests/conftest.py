import pytest

from familiar.models import PetConfig, PetState
from familiar.pet import Pet


@pytest.fixture
def make_pet():
    def _make(config=None, **state_fields):
        state = PetState(**state_fields)
        return Pet(config or PetConfig(), state)
    return _make
