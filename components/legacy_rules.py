"""
Threshold-band classifier from earlier releases.

Kept only as a regression fixture to compare against :class:`EmotionClassifier`.
Nothing in the simulation loop calls it.
"""
from components.vad_projector import VAD

LEGACY_LABELS = ("excited", "content", "anxious", "depressed", "pleasant", "angry", "calm", "complex")


def classify_by_rules(vad: VAD) -> str:
    a, v, d = vad.arousal, vad.valence, vad.dominance

    if v > 70 and a > 70 and d > 60:
        return "excited"
    if v > 70 and a < 40 and d > 50:
        return "content"
    if v < 30 and a > 70 and d < 40:
        return "anxious"
    if v < 30 and a < 40 and d < 40:
        return "depressed"
    if v > 60 and a > 60 and d < 40:
        return "pleasant"
    if v < 40 and a > 60 and d > 60:
        return "angry"
    if v > 50 and a < 50 and d < 50:
        return "calm"
    return "complex"
