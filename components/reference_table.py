"""Labelled VAD reference points used by the emotion classifier."""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Iterable, Sequence, Tuple

from jsonschema import ValidationError, validate

logger = logging.getLogger(__name__)


class ReferenceTableError(ValueError):
    """Raised when a reference table is empty or cannot be parsed."""


@dataclass(frozen=True)
class EmotionReferencePoint:
    label: str
    valence: float    # [-1, 1]
    dominance: float  # [-1, 1]
    arousal: float    # [0, 1]


REFERENCE_TABLE_SCHEMA = {
    "type": "array",
    "minItems": 1,
    "items": {
        "type": "object",
        "required": ["emotion", "valence", "dominance", "arousal"],
        "properties": {
            "emotion": {"type": "string", "minLength": 1},
            "valence": {"type": "number", "minimum": -1, "maximum": 1},
            "dominance": {"type": "number", "minimum": -1, "maximum": 1},
            "arousal": {"type": "number", "minimum": 0, "maximum": 1},
        },
    },
}


def _p(label, valence, dominance, arousal):
    return EmotionReferencePoint(label, valence, dominance, arousal)


DEFAULT_REFERENCE_TABLE: Tuple[EmotionReferencePoint, ...] = (
    _p("joy", 0.85, 0.45, 0.70),
    _p("excitement", 0.75, 0.55, 0.90),
    _p("contentment", 0.70, 0.35, 0.25),
    _p("serenity", 0.60, 0.20, 0.10),
    _p("calm", 0.30, 0.10, 0.15),
    _p("pride", 0.70, 0.75, 0.55),
    _p("love", 0.85, 0.20, 0.50),
    _p("trust", 0.55, 0.15, 0.35),
    _p("gratitude", 0.75, 0.05, 0.40),
    _p("hope", 0.55, 0.25, 0.50),
    _p("surprise", 0.20, -0.05, 0.85),
    _p("curiosity", 0.40, 0.30, 0.60),
    _p("anger", -0.60, 0.60, 0.85),
    _p("contempt", -0.50, 0.55, 0.45),
    _p("disgust", -0.65, 0.25, 0.55),
    _p("fear", -0.70, -0.65, 0.85),
    _p("anxiety", -0.55, -0.45, 0.75),
    _p("shame", -0.60, -0.60, 0.40),
    _p("guilt", -0.55, -0.40, 0.45),
    _p("sadness", -0.70, -0.45, 0.25),
    _p("loneliness", -0.55, -0.50, 0.20),
    _p("boredom", -0.30, -0.20, 0.10),
    _p("depression", -0.80, -0.70, 0.10),
    _p("frustration", -0.50, 0.10, 0.70),
    _p("jealousy", -0.45, 0.05, 0.65),
)


def parse_reference_table(payload) -> Tuple[EmotionReferencePoint, ...]:
    """
    Converts a decoded JSON payload into reference points.

    Raises:
        ReferenceTableError: If the payload does not match the expected shape
            or holds no entries.
    """
    try:
        validate(instance=payload, schema=REFERENCE_TABLE_SCHEMA)
    except ValidationError as e:
        raise ReferenceTableError(f"Invalid reference table: {e.message}") from e
    return tuple(
        EmotionReferencePoint(
            label=entry["emotion"],
            valence=float(entry["valence"]),
            dominance=float(entry["dominance"]),
            arousal=float(entry["arousal"]),
        )
        for entry in payload
    )


def load_reference_table(path) -> Tuple[EmotionReferencePoint, ...]:
    """Strictly loads a reference table from a JSON file."""
    if not os.path.exists(path):
        raise FileNotFoundError(f"Reference table not found at: {path}")
    with open(path, "r", encoding="utf-8") as f:
        try:
            payload = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ReferenceTableError(f"Reference table {path} is not valid JSON: {e}") from e
    return parse_reference_table(payload)


def load_reference_table_or_default(path=None) -> Tuple[EmotionReferencePoint, ...]:
    """Loads ``path`` if given, falling back to the built-in table on any failure."""
    if path is None:
        return DEFAULT_REFERENCE_TABLE
    try:
        table = load_reference_table(path)
    except (OSError, ReferenceTableError) as e:
        logger.warning("Falling back to built-in reference table: %s", e)
        return DEFAULT_REFERENCE_TABLE
    logger.info("Loaded %d reference emotions from %s", len(table), path)
    return table


def table_to_payload(table: Iterable[EmotionReferencePoint]) -> Sequence[dict]:
    return [
        {"emotion": p.label, "valence": p.valence, "dominance": p.dominance, "arousal": p.arousal}
        for p in table
    ]
