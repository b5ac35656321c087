import numpy as np
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from components.reference_table import (
    DEFAULT_REFERENCE_TABLE,
    EmotionReferencePoint,
    ReferenceTableError,
)
from components.vad_projector import VAD

NEUTRAL_LABEL = "calm"

K_NEIGHBORS = 3
MAX_DISTANCE = 0.8
# Axis order in the reference matrix: valence, dominance, arousal
AXIS_WEIGHTS = np.array([0.4, 0.35, 0.25])
WEIGHT_SMOOTHING = 0.1

MAX_CONFIDENCE = 0.9
MIN_CONFIDENCE = 0.3
ALTERNATIVE_SCALE = 0.8
MAX_ALTERNATIVES = 2


@dataclass(frozen=True)
class Neighbor:
    label: str
    distance: float
    weight: float


@dataclass(frozen=True)
class EmotionMatch:
    label: str
    confidence: float
    alternatives: Tuple[Tuple[str, float], ...] = ()
    neighbors: Tuple[Neighbor, ...] = field(default=(), compare=False)
    fallback: bool = False


def normalize_vad(vad: VAD) -> np.ndarray:
    """Maps a [0, 100] VAD triple into the reference domain (valence, dominance, arousal)."""
    return np.array([
        (vad.valence - 50.0) / 50.0,
        (vad.dominance - 50.0) / 50.0,
        vad.arousal / 100.0,
    ])


class EmotionClassifier:
    """
    Weighted-distance K-nearest-neighbour classifier over a fixed reference table.

    The query VAD is normalized into the table's domain, a weighted Euclidean
    distance is taken to every reference entry, and the ``k`` nearest entries
    receive inverse-distance weights. The returned label is that of the single
    highest-weight entry; weights of entries sharing a label are not summed.
    When even the nearest entry lies beyond ``max_distance`` the neutral label
    is returned instead.
    """
    def __init__(
        self,
        reference_table: Optional[Sequence[EmotionReferencePoint]] = None,
        k: int = K_NEIGHBORS,
        max_distance: float = MAX_DISTANCE,
        neutral_label: str = NEUTRAL_LABEL,
    ):
        """
        Args:
            reference_table (Sequence[EmotionReferencePoint]): Labelled points.
                Defaults to the built-in table.
            k (int): Number of neighbours considered.
            max_distance (float): Nearest-distance cut-off for the neutral fallback.
            neutral_label (str): Label returned outside the reference range.

        Raises:
            ReferenceTableError: If the table has no entries.
        """
        table = tuple(DEFAULT_REFERENCE_TABLE if reference_table is None else reference_table)
        if not table:
            raise ReferenceTableError("The emotion reference table must contain at least one entry.")
        if k < 1:
            raise ValueError("k must be positive.")

        self.reference_table = table
        self.k = k
        self.max_distance = max_distance
        self.neutral_label = neutral_label

        self._labels = [p.label for p in table]
        self._points = np.array([[p.valence, p.dominance, p.arousal] for p in table], dtype=np.float64)
        self._points.setflags(write=False)

    def distances(self, vad: VAD) -> np.ndarray:
        """Weighted distance from ``vad`` to every reference entry, in table order."""
        diff = (self._points - normalize_vad(vad)) * AXIS_WEIGHTS
        return np.sqrt(np.sum(diff ** 2, axis=1))

    def neighbors(self, vad: VAD) -> List[Neighbor]:
        distances = self.distances(vad)
        # Stable sort keeps table order among equal distances.
        order = np.argsort(distances, kind="stable")[: self.k]
        nearest = distances[order]
        raw = 1.0 / (nearest + WEIGHT_SMOOTHING)
        weights = raw / raw.sum()
        return [
            Neighbor(label=self._labels[i], distance=float(d), weight=float(w))
            for i, d, w in zip(order, nearest, weights)
        ]

    def classify(self, vad: VAD) -> str:
        return self.classify_detailed(vad).label

    def classify_detailed(self, vad: VAD) -> EmotionMatch:
        """
        Classifies ``vad`` and reports a confidence score and alternatives.

        Returns:
            EmotionMatch: The winning label, its confidence in [0, 1], and up to
            two alternative labels with confidence scaled by 0.8.
        """
        neighbors = self.neighbors(vad)
        min_distance = neighbors[0].distance

        if min_distance > self.max_distance:
            return EmotionMatch(
                label=self.neutral_label,
                confidence=MIN_CONFIDENCE,
                neighbors=tuple(neighbors),
                fallback=True,
            )

        # Entry-level argmax; the first of equal weights wins.
        top_idx = int(np.argmax([n.weight for n in neighbors]))
        top = neighbors[top_idx]

        confidence = MAX_CONFIDENCE - (min_distance / self.max_distance) * (MAX_CONFIDENCE - MIN_CONFIDENCE)
        confidence = min(max(confidence, 0.0), 1.0)
        confidence = min(confidence, top.weight)

        others = [n for i, n in enumerate(neighbors) if i != top_idx][:MAX_ALTERNATIVES]
        alternatives = tuple((n.label, n.weight * ALTERNATIVE_SCALE) for n in others)

        return EmotionMatch(
            label=top.label,
            confidence=confidence,
            alternatives=alternatives,
            neighbors=tuple(neighbors),
        )
