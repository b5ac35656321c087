import json
import os

from systems.persistence import SessionPersistenceManager
from systems.simulation_clock import SimulationClock


def test_session_checkpoint_cycle(tmp_path):
    clock = SimulationClock(interval=3600.0)
    clock.start()
    clock.inject_hormone("dopamine")
    clock.on_timer(clock.generation)
    clock.stop()
    clock.set_parameter("cortisol", "force", 42.5)

    persistence_manager = SessionPersistenceManager(tmp_path / "checkpoints")
    state = clock.export_state()
    assert persistence_manager.save_checkpoint(state, clock.history[-1].time)
    assert persistence_manager.has_checkpoints()

    expected_hormones = clock.hormones
    expected_history = clock.history
    clock.reset()
    assert clock.hormones != expected_hormones

    loaded = persistence_manager.load_latest_checkpoint()
    assert loaded is not None
    clock.restore_state(loaded)

    assert clock.hormones == expected_hormones
    assert clock.history == expected_history


def test_old_checkpoints_are_pruned(tmp_path):
    persistence_manager = SessionPersistenceManager(tmp_path, retain_n=2)
    for step in (1, 2, 10):
        persistence_manager.save_checkpoint({"step": step}, step)

    with open(tmp_path / "manifest.json") as f:
        manifest = json.load(f)
    assert list(manifest.keys()) == ["3", "2"]
    assert [entry["step"] for entry in manifest.values()] == [10, 2]
    assert not os.path.exists(tmp_path / "session_1.json")
    assert persistence_manager.load_latest_checkpoint() == {"step": 10}


def test_corrupted_checkpoint_is_refused(tmp_path):
    persistence_manager = SessionPersistenceManager(tmp_path)
    persistence_manager.save_checkpoint({"hormones": {}}, 3)

    with open(tmp_path / "session_1.json", "a") as f:
        f.write(" ")
    assert persistence_manager.load_latest_checkpoint() is None
    assert persistence_manager.load_latest_checkpoint(verify_integrity=False) == {"hormones": {}}


def test_no_checkpoints(tmp_path):
    persistence_manager = SessionPersistenceManager(tmp_path / "nested" / "dir")
    assert not persistence_manager.has_checkpoints()
    assert persistence_manager.load_latest_checkpoint() is None


def test_unserializable_state_is_not_saved(tmp_path):
    persistence_manager = SessionPersistenceManager(tmp_path)
    assert not persistence_manager.save_checkpoint({"bad": object()}, 1)
    assert not persistence_manager.has_checkpoints()
    assert not os.path.exists(tmp_path / "session_1.json.tmp")


def test_checkpoint_saved_after_reset_is_latest(tmp_path):
    persistence_manager = SessionPersistenceManager(tmp_path, retain_n=2)
    clock = SimulationClock(interval=3600.0)
    clock.start()
    for _ in range(11):
        clock.on_timer(clock.generation)
        if clock.history[-1].time >= 10:
            assert persistence_manager.save_checkpoint(clock.export_state(), clock.history[-1].time)

    clock.reset()
    clock.set_parameter("gaba", "force", 99)
    assert persistence_manager.save_checkpoint(clock.export_state(), clock.history[-1].time)

    with open(tmp_path / "manifest.json") as f:
        manifest = json.load(f)
    assert len(manifest) == 2
    assert [entry["step"] for entry in manifest.values()] == [0, 11]

    loaded = persistence_manager.load_latest_checkpoint()
    assert loaded["hormones"]["gaba"]["force"] == 99
    clock.restore_state(loaded)
    assert [r.time for r in clock.history] == [0]


def test_sequence_continues_across_managers(tmp_path):
    SessionPersistenceManager(tmp_path).save_checkpoint({"session": 1}, 5)
    reopened = SessionPersistenceManager(tmp_path)
    reopened.save_checkpoint({"session": 2}, 0)
    assert reopened.load_latest_checkpoint() == {"session": 2}
    assert os.path.exists(tmp_path / "session_1.json")
