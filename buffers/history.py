"""Bounded, time-ordered record of simulation snapshots."""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, Iterator, List, Mapping, Optional

import numpy as np

from components.hormone_bank import HORMONE_NAMES
from components.vad_projector import VAD

DEFAULT_MAX_HISTORY = 100


@dataclass(frozen=True)
class HistoryRecord:
    time: int
    arousal: float
    valence: float
    dominance: float
    emotion: str
    adrenaline: float
    cortisol: float
    gaba: float
    dopamine: float
    serotonin: float
    testosterone: float
    oxytocin: float

    @classmethod
    def from_state(cls, time: int, vad: VAD, emotion: str, levels: Mapping[str, float]) -> "HistoryRecord":
        return cls(
            time=time,
            arousal=vad.arousal,
            valence=vad.valence,
            dominance=vad.dominance,
            emotion=emotion,
            **{name.value: float(levels[name.value]) for name in HORMONE_NAMES},
        )

    def as_dict(self) -> Dict[str, object]:
        return asdict(self)


NUMERIC_FIELDS = ("time", "arousal", "valence", "dominance") + tuple(n.value for n in HORMONE_NAMES)


class History:
    """
    Ring buffer of :class:`HistoryRecord` with FIFO eviction.

    Reads return records oldest first; once ``capacity`` is reached each
    append evicts the oldest record.
    """

    def __init__(self, capacity: int = DEFAULT_MAX_HISTORY):
        if capacity <= 0:
            raise ValueError("capacity must be positive.")
        self.capacity = capacity
        self._buf: List[Optional[HistoryRecord]] = [None] * capacity
        self.ptr, self.size = 0, 0

    def append(self, record: HistoryRecord):
        self._buf[self.ptr] = record
        self.ptr = (self.ptr + 1) % self.capacity
        self.size = min(self.size + 1, self.capacity)

    def clear(self):
        self._buf = [None] * self.capacity
        self.ptr, self.size = 0, 0

    def last(self) -> Optional[HistoryRecord]:
        if self.size == 0:
            return None
        return self._buf[(self.ptr - 1) % self.capacity]

    def next_time(self) -> int:
        last = self.last()
        return 0 if last is None else last.time + 1

    def records(self) -> List[HistoryRecord]:
        start = (self.ptr - self.size) % self.capacity
        return [self._buf[(start + i) % self.capacity] for i in range(self.size)]

    def as_arrays(self) -> Dict[str, np.ndarray]:
        """Column-wise view of the numeric fields plus the emotion labels."""
        records = self.records()
        columns = {
            name: np.array([getattr(r, name) for r in records], dtype=np.int64 if name == "time" else np.float64)
            for name in NUMERIC_FIELDS
        }
        columns["emotion"] = np.array([r.emotion for r in records], dtype=object)
        return columns

    def __iter__(self) -> Iterator[HistoryRecord]:
        return iter(self.records())

    def __getitem__(self, idx):
        return self.records()[idx]

    def __len__(self):
        return self.size
