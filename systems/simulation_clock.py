import logging
import threading
from enum import Enum
from typing import Dict, List, Optional

import numpy as np

from buffers.history import DEFAULT_MAX_HISTORY, History, HistoryRecord
from components.emotion_classifier import EmotionClassifier, EmotionMatch
from components.hormone_bank import HormoneBank, HormoneName, NameLike
from components.vad_projector import VAD, project

logger = logging.getLogger(__name__)

# Seconds between ticks while running.
UPDATE_INTERVAL = 1.0


class ClockState(str, Enum):
    STOPPED = "stopped"
    RUNNING = "running"


class SimulationClock:
    """
    Drives the hormone bank in discrete ticks and records the derived history.

    All bank and history mutations go through ``self._lock``, so a timer tick
    and a user injection never interleave. Every ``start()`` opens a new
    generation; a timer fire that carries an outdated generation is dropped,
    and ``stop()`` joins the driver thread before returning, so no record is
    appended once ``stop()`` has returned.
    """
    def __init__(
        self,
        bank: Optional[HormoneBank] = None,
        classifier: Optional[EmotionClassifier] = None,
        max_history: int = DEFAULT_MAX_HISTORY,
        interval: float = UPDATE_INTERVAL,
        telemetry_manager=None,
    ):
        if interval <= 0:
            raise ValueError("interval must be positive.")
        self.bank = bank if bank is not None else HormoneBank()
        self.classifier = classifier if classifier is not None else EmotionClassifier()
        self.interval = interval
        self.telemetry_manager = telemetry_manager

        self._history = History(max_history)
        self._lock = threading.RLock()
        self._state = ClockState.STOPPED
        self._generation = 0
        self._thread: Optional[threading.Thread] = None
        self._stop_event: Optional[threading.Event] = None

        with self._lock:
            self._record_locked()

    # --- State machine ---

    def start(self):
        with self._lock:
            if self._state is ClockState.RUNNING:
                return
            self._state = ClockState.RUNNING
            self._generation += 1
            stop_event = threading.Event()
            thread = threading.Thread(
                target=self._run,
                args=(self._generation, stop_event),
                name=f"simulation-clock-{self._generation}",
                daemon=True,
            )
            self._thread, self._stop_event = thread, stop_event
            thread.start()
        logger.info("Simulation clock started (interval %.3fs).", self.interval)

    def stop(self):
        with self._lock:
            halted = self._halt_locked()
        self._join_driver(*halted)

    def _halt_locked(self):
        was_running = self._state is ClockState.RUNNING
        self._state = ClockState.STOPPED
        self._generation += 1
        thread, stop_event = self._thread, self._stop_event
        self._thread, self._stop_event = None, None
        return was_running, thread, stop_event

    def _join_driver(self, was_running, thread, stop_event):
        """Waits for a halted driver thread; must be called without holding the lock."""
        if stop_event is not None:
            stop_event.set()
        if thread is not None and thread is not threading.current_thread():
            thread.join()
        if was_running:
            logger.info("Simulation clock stopped.")

    def reset(self):
        """Stops the clock, restores default hormones and reseeds the history."""
        with self._lock:
            halted = self._halt_locked()
            self.bank.reset()
            self._history.clear()
            self._record_locked()
        self._join_driver(*halted)
        logger.info("Simulation reset to defaults.")

    def close(self):
        self.stop()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def _run(self, generation: int, stop_event: threading.Event):
        while not stop_event.wait(self.interval):
            if not self.on_timer(generation):
                return

    def on_timer(self, generation: int) -> bool:
        """
        Handles one timer fire. Returns False when the fire is stale and the
        driver should exit.
        """
        with self._lock:
            if generation != self._generation or self._state is not ClockState.RUNNING:
                logger.warning(
                    "Dropping stale timer fire (generation %d, current %d).", generation, self._generation
                )
                return False
            self.bank.tick()
            self._record_locked()
            if self.telemetry_manager:
                self.telemetry_manager.update_on_tick()
            return True

    # --- Mutators ---

    def inject_hormone(self, name: NameLike) -> float:
        """Injects ``name``; while running the effect is recorded immediately."""
        name = HormoneName(name)
        with self._lock:
            level = self.bank.inject(name)
            if self._state is ClockState.RUNNING:
                self._record_locked()
            if self.telemetry_manager:
                self.telemetry_manager.update_on_inject(name.value)
        return level

    def set_parameter(self, name: NameLike, field: str, value: float) -> float:
        with self._lock:
            return self.bank.set_parameter(name, field, value)

    def _record_locked(self) -> HistoryRecord:
        vad = project(self.bank)
        record = HistoryRecord.from_state(
            time=self._history.next_time(),
            vad=vad,
            emotion=self.classifier.classify(vad),
            levels=self.bank.snapshot(),
        )
        self._history.append(record)
        if self.telemetry_manager:
            self.telemetry_manager.update_on_record(record)
        return record

    # --- Read accessors ---

    @property
    def state(self) -> ClockState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def is_running(self) -> bool:
        return self._state is ClockState.RUNNING

    @property
    def hormones(self) -> Dict[str, Dict[str, float]]:
        with self._lock:
            return self.bank.as_dict()

    @property
    def current_vad(self) -> VAD:
        with self._lock:
            return project(self.bank)

    @property
    def current_emotion(self) -> str:
        return self.classifier.classify(self.current_vad)

    @property
    def current_match(self) -> EmotionMatch:
        return self.classifier.classify_detailed(self.current_vad)

    @property
    def history(self) -> List[HistoryRecord]:
        with self._lock:
            return self._history.records()

    @property
    def max_history(self) -> int:
        return self._history.capacity

    def history_arrays(self) -> Dict[str, np.ndarray]:
        with self._lock:
            return self._history.as_arrays()

    # --- Checkpointing ---

    def export_state(self) -> dict:
        with self._lock:
            return {
                "hormones": self.bank.as_dict(),
                "history": [r.as_dict() for r in self._history.records()],
            }

    def restore_state(self, state: dict):
        """Restores a snapshot from :meth:`export_state`; the clock ends up stopped."""
        with self._lock:
            halted = self._halt_locked()
            self.bank.load_dict(state["hormones"])
            self._history.clear()
            for entry in state.get("history", [])[-self._history.capacity:]:
                self._history.append(HistoryRecord(**entry))
            if len(self._history) == 0:
                self._record_locked()
        self._join_driver(*halted)
        logger.info("Restored simulation state with %d history records.", len(self._history))
