"""
Blendshape scorers: dominant emotion and eye state

Both scorers are pure functions of a single frame's blendshape scores.
"""
import math
import time
from typing import Dict, Optional, Tuple

import numpy as np

from .models import BlendshapeScores, Emotion, EmotionResult, EyeState

DEFAULT_ACTIVATION_THRESHOLD = 0.25
DEFAULT_EYE_CLOSED_THRESHOLD = 0.4

# Insertion order is the tie-break priority: first maximum wins
EMOTION_BLENDSHAPES: Dict[Emotion, Tuple[str, ...]] = {
    Emotion.HAPPY: (
        "mouthSmileLeft", "mouthSmileRight",
        "cheekSquintLeft", "cheekSquintRight",
    ),
    Emotion.SAD: (
        "mouthFrownLeft", "mouthFrownRight",
        "browDownLeft", "browDownRight",
    ),
    Emotion.ANGRY: (
        "browDownLeft", "browDownRight",
        "noseSneerLeft", "noseSneerRight",
        "mouthPressLeft", "mouthPressRight",
    ),
    Emotion.NERVOUS: (
        "browInnerUp", "eyeWideLeft", "eyeWideRight", "jawOpen",
    ),
}

EYE_BLINK_BLENDSHAPES = ("eyeBlinkLeft", "eyeBlinkRight")


def blendshape_score(blendshapes: BlendshapeScores, name: str) -> float:
    """Look up a score clamped to [0, 1]; missing or invalid reads as 0.0"""
    value = blendshapes.get(name, 0.0) if blendshapes else 0.0
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(value):
        return 0.0
    return max(0.0, min(1.0, value))


def mean_score(blendshapes: BlendshapeScores, names: Tuple[str, ...]) -> float:
    return float(np.mean([blendshape_score(blendshapes, name) for name in names]))


class EmotionScorer:
    """Maps blendshapes to one dominant emotion.

    Each non-neutral emotion is the unweighted mean of its blendshapes. The
    strongest one wins when it is above the activation threshold; otherwise
    the result is NEUTRAL with confidence 1 - strongest.
    """

    def __init__(self, activation_threshold: float = DEFAULT_ACTIVATION_THRESHOLD):
        self.activation_threshold = activation_threshold

    def composite_scores(self, blendshapes: BlendshapeScores) -> Dict[Emotion, float]:
        return {
            emotion: mean_score(blendshapes, names)
            for emotion, names in EMOTION_BLENDSHAPES.items()
        }

    def score(self, blendshapes: BlendshapeScores,
              timestamp: Optional[float] = None) -> EmotionResult:
        if timestamp is None:
            timestamp = time.time()

        scores = self.composite_scores(blendshapes)
        # max() keeps the first maximum in priority order
        dominant = max(scores, key=scores.get)
        strongest = scores[dominant]

        if strongest > self.activation_threshold:
            return EmotionResult(dominant, strongest, timestamp)
        return EmotionResult(Emotion.NEUTRAL, 1.0 - strongest, timestamp)


class EyeStateScorer:
    """Maps blink blendshapes to OPEN or CLOSED"""

    def __init__(self, closed_threshold: float = DEFAULT_EYE_CLOSED_THRESHOLD):
        self.closed_threshold = closed_threshold

    def score(self, blendshapes: BlendshapeScores) -> EyeState:
        blink = mean_score(blendshapes, EYE_BLINK_BLENDSHAPES)
        return EyeState.CLOSED if blink > self.closed_threshold else EyeState.OPEN
