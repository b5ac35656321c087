import math
from typing import NamedTuple

from components.hormone_bank import HormoneBank, HormoneName, clamp_level


class VAD(NamedTuple):
    arousal: float
    valence: float
    dominance: float


def project(bank: HormoneBank) -> VAD:
    """
    Maps hormone levels onto the Arousal / Valence / Dominance axes.

    Each axis is a fixed linear combination of hormone levels. The clamp to
    [0, 100] is applied once, to the combined value only, so intermediate
    terms may go negative or exceed 100.

    Args:
        bank (HormoneBank): The bank to read current levels from.

    Returns:
        VAD: The derived triple.
    """
    h = bank.snapshot()
    adrenaline = h[HormoneName.ADRENALINE.value]
    cortisol = h[HormoneName.CORTISOL.value]
    gaba = h[HormoneName.GABA.value]
    dopamine = h[HormoneName.DOPAMINE.value]
    serotonin = h[HormoneName.SEROTONIN.value]
    testosterone = h[HormoneName.TESTOSTERONE.value]
    oxytocin = h[HormoneName.OXYTOCIN.value]

    arousal = clamp_level(adrenaline + cortisol - gaba + dopamine * 0.3)
    valence = clamp_level(serotonin + dopamine * 0.7 + oxytocin * 0.5 - cortisol * 0.3)
    dominance = clamp_level(testosterone + dopamine * 0.4 - oxytocin * 0.3 + adrenaline * 0.2)
    return VAD(arousal=arousal, valence=valence, dominance=dominance)


def emotion_intensity(vad: VAD) -> float:
    """Distance of ``vad`` from the neutral centre (50, 50, 50), scaled to [0, 100]."""
    distance = math.sqrt(
        (vad.arousal - 50) ** 2 + (vad.valence - 50) ** 2 + (vad.dominance - 50) ** 2
    )
    return clamp_level(distance / math.sqrt(3))


def is_intense(vad: VAD, threshold: float = 80.0) -> bool:
    return vad.arousal > threshold or vad.valence > threshold or vad.dominance > threshold
