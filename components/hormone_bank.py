"""Hormone levels with per-tick multiplicative decay and additive injection."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Union

import numpy as np

logger = logging.getLogger(__name__)

LEVEL_MIN, LEVEL_MAX = 0.0, 100.0
DECAY_MIN, DECAY_MAX = 0.80, 0.99


class HormoneName(str, Enum):
    ADRENALINE = "adrenaline"
    CORTISOL = "cortisol"
    GABA = "gaba"
    DOPAMINE = "dopamine"
    SEROTONIN = "serotonin"
    TESTOSTERONE = "testosterone"
    OXYTOCIN = "oxytocin"


HORMONE_NAMES = tuple(HormoneName)
_INDEX = {name: i for i, name in enumerate(HORMONE_NAMES)}

# (current, force, decay)
DEFAULT_HORMONES = {
    HormoneName.ADRENALINE: (25.0, 15.0, 0.98),
    HormoneName.CORTISOL: (35.0, 20.0, 0.99),
    HormoneName.GABA: (45.0, 25.0, 0.97),
    HormoneName.DOPAMINE: (40.0, 18.0, 0.985),
    HormoneName.SEROTONIN: (50.0, 12.0, 0.99),
    HormoneName.TESTOSTERONE: (30.0, 22.0, 0.975),
    HormoneName.OXYTOCIN: (35.0, 16.0, 0.98),
}

PARAMETER_FIELDS = ("force", "decay")

NameLike = Union[HormoneName, str]


def clamp(value, low, high):
    return max(low, min(high, value))


def clamp_level(value: float) -> float:
    return clamp(float(value), LEVEL_MIN, LEVEL_MAX)


def clamp_decay(value: float) -> float:
    return clamp(float(value), DECAY_MIN, DECAY_MAX)


@dataclass(frozen=True)
class Hormone:
    """Read-only view of one signal."""

    current: float
    force: float
    decay: float


class HormoneBank:
    """
    Holds the seven hormone signals in enum-indexed arrays.

    Every mutator clamps on write, so ``current`` and ``force`` stay in
    [0, 100] and ``decay`` stays in [0.80, 0.99] after any call. Out-of-range
    parameter edits are clamped rather than rejected.
    """

    def __init__(self):
        n = len(HORMONE_NAMES)
        self._current = np.zeros(n, dtype=np.float64)
        self._force = np.zeros(n, dtype=np.float64)
        self._decay = np.zeros(n, dtype=np.float64)
        self.reset()

    @staticmethod
    def _index(name: NameLike) -> int:
        return _INDEX[HormoneName(name)]

    def reset(self):
        for name, (current, force, decay) in DEFAULT_HORMONES.items():
            i = _INDEX[name]
            self._current[i] = current
            self._force[i] = force
            self._decay[i] = decay

    def inject(self, name: NameLike) -> float:
        """Add the hormone's ``force`` to its level and return the new level."""
        i = self._index(name)
        self._current[i] = clamp_level(self._current[i] + self._force[i])
        logger.debug("Injected %s -> %.2f", HORMONE_NAMES[i].value, self._current[i])
        return float(self._current[i])

    def set_parameter(self, name: NameLike, field: str, value: float) -> float:
        """Store ``force`` or ``decay`` after clamping it into its domain."""
        i = self._index(name)
        if field == "force":
            stored = clamp_level(value)
            self._force[i] = stored
        elif field == "decay":
            stored = clamp_decay(value)
            self._decay[i] = stored
        else:
            raise ValueError(f"Unknown hormone parameter '{field}', expected one of {PARAMETER_FIELDS}.")
        logger.debug("Set %s.%s = %.3f (requested %r)", HORMONE_NAMES[i].value, field, stored, value)
        return stored

    def tick(self):
        """Apply one decay step to all signals at once."""
        self._current = np.clip(self._current * self._decay, LEVEL_MIN, LEVEL_MAX)

    def get(self, name: NameLike) -> Hormone:
        i = self._index(name)
        return Hormone(
            current=float(self._current[i]),
            force=float(self._force[i]),
            decay=float(self._decay[i]),
        )

    def level(self, name: NameLike) -> float:
        return float(self._current[self._index(name)])

    def snapshot(self) -> Dict[str, float]:
        """Current levels keyed by hormone name, in the fixed enum order."""
        return {name.value: float(self._current[i]) for i, name in enumerate(HORMONE_NAMES)}

    def levels(self) -> np.ndarray:
        return self._current.copy()

    def as_dict(self) -> Dict[str, Dict[str, float]]:
        return {
            name.value: {
                "current": float(self._current[i]),
                "force": float(self._force[i]),
                "decay": float(self._decay[i]),
            }
            for i, name in enumerate(HORMONE_NAMES)
        }

    def load_dict(self, payload: Dict[str, Dict[str, float]]):
        """Restore parameters exported by :meth:`as_dict`, clamping each field."""
        for key, params in payload.items():
            i = self._index(key)
            self._current[i] = clamp_level(params["current"])
            self._force[i] = clamp_level(params["force"])
            self._decay[i] = clamp_decay(params["decay"])

    def __iter__(self):
        return iter(HORMONE_NAMES)

    def __len__(self):
        return len(HORMONE_NAMES)
