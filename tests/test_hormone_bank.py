import numpy as np
import pytest

from components.hormone_bank import (
    DECAY_MAX,
    DECAY_MIN,
    HORMONE_NAMES,
    Hormone,
    HormoneBank,
    HormoneName,
)


def test_defaults():
    bank = HormoneBank()
    assert bank.get("dopamine") == Hormone(current=40.0, force=18.0, decay=0.985)
    assert bank.get(HormoneName.GABA) == Hormone(current=45.0, force=25.0, decay=0.97)
    assert list(bank.snapshot().keys()) == [name.value for name in HORMONE_NAMES]
    assert len(bank) == 7


def test_inject_adds_force_and_clamps():
    bank = HormoneBank()
    assert bank.inject("dopamine") == pytest.approx(58.0)

    bank.reset()
    bank.set_parameter("dopamine", "force", 60)
    assert bank.inject("dopamine") == 100.0
    assert bank.inject("dopamine") == 100.0


def test_set_parameter_clamps_instead_of_rejecting():
    bank = HormoneBank()
    assert bank.set_parameter("gaba", "decay", 1.5) == DECAY_MAX
    assert bank.get("gaba").decay == 0.99
    assert bank.set_parameter("gaba", "decay", 0.1) == DECAY_MIN
    assert bank.set_parameter("cortisol", "force", 150) == 100.0
    assert bank.set_parameter("cortisol", "force", -5) == 0.0


def test_unknown_names_are_rejected():
    bank = HormoneBank()
    with pytest.raises(ValueError):
        bank.inject("melatonin")
    with pytest.raises(ValueError):
        bank.set_parameter("gaba", "current", 10)


def test_tick_decays_every_hormone_once():
    bank = HormoneBank()
    before = bank.as_dict()
    bank.tick()
    after = bank.snapshot()
    for name, params in before.items():
        assert after[name] == pytest.approx(params["current"] * params["decay"])


def test_decay_is_monotonic_and_never_negative():
    bank = HormoneBank()
    previous = bank.levels()
    for _ in range(500):
        bank.tick()
        levels = bank.levels()
        assert np.all(levels <= previous)
        assert np.all(levels >= 0.0)
        previous = levels
    assert np.all(previous < 1.0)


def test_reset_restores_defaults():
    bank = HormoneBank()
    bank.inject("adrenaline")
    bank.set_parameter("adrenaline", "decay", 0.8)
    bank.tick()
    bank.reset()
    assert bank.as_dict() == HormoneBank().as_dict()


def test_load_dict_clamps_restored_values():
    bank = HormoneBank()
    payload = bank.as_dict()
    payload["oxytocin"] = {"current": 250.0, "force": -1.0, "decay": 3.0}
    bank.load_dict(payload)
    assert bank.get("oxytocin") == Hormone(current=100.0, force=0.0, decay=0.99)
