"""
Domain models/entities
"""
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np

# Blendshape name -> activation score in [0, 1]
BlendshapeScores = Dict[str, float]


class Emotion(str, Enum):
    """Closed set of emotion labels"""
    HAPPY = "HAPPY"
    SAD = "SAD"
    ANGRY = "ANGRY"
    NERVOUS = "NERVOUS"
    NEUTRAL = "NEUTRAL"

    @property
    def emoji(self) -> str:
        return _EMOTION_EMOJI[self]


_EMOTION_EMOJI = {
    Emotion.HAPPY: "\U0001F60A",
    Emotion.SAD: "\U0001F622",
    Emotion.ANGRY: "\U0001F620",
    Emotion.NERVOUS: "\U0001F630",
    Emotion.NEUTRAL: "\U0001F610",
}


class EyeState(str, Enum):
    """Eye state; UNKNOWN only before the first scored frame"""
    OPEN = "OPEN"
    CLOSED = "CLOSED"
    UNKNOWN = "UNKNOWN"

    @property
    def label(self) -> str:
        if self is EyeState.OPEN:
            return "EYES OPEN"
        if self is EyeState.CLOSED:
            return "EYES CLOSED"
        return "DETECTING..."

    @property
    def emoji(self) -> str:
        if self is EyeState.OPEN:
            return "\U0001F441"
        if self is EyeState.CLOSED:
            return "\U0001F611"
        return "\U0001F50D"


class PipelineState(str, Enum):
    """Pipeline orchestrator states"""
    IDLE = "IDLE"
    NO_FACE = "NO_FACE"
    FACE_DETECTED = "FACE_DETECTED"
    ERROR = "ERROR"


@dataclass(frozen=True)
class Landmark:
    """Normalized 3-D face mesh point (0-1 relative to image size)"""
    x: float
    y: float
    z: float = 0.0


@dataclass(frozen=True)
class BoundingRegion:
    """Face region in source image pixel coordinates"""
    left: float
    top: float
    right: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    def to_dict(self) -> dict:
        return {
            "left": self.left,
            "top": self.top,
            "right": self.right,
            "bottom": self.bottom,
        }


@dataclass
class DetectionResult:
    """One detected face as reported by the landmark provider"""
    region: BoundingRegion
    landmarks: List[Landmark]  # Order identifies the anatomical point
    blendshapes: BlendshapeScores
    image_width: int
    image_height: int


@dataclass(frozen=True)
class EmotionResult:
    """Dominant emotion with confidence"""
    label: Emotion = Emotion.NEUTRAL
    confidence: float = 0.0
    timestamp: float = field(default_factory=time.time, compare=False)

    @property
    def emoji(self) -> str:
        return self.label.emoji

    @property
    def confidence_percent(self) -> int:
        return int(self.confidence * 100)

    def to_dict(self) -> dict:
        return {
            "label": self.label.value,
            "confidence": self.confidence,
            "confidence_percent": self.confidence_percent,
            "emoji": self.emoji,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class MappedGeometry:
    """Overlay geometry in target surface coordinates"""
    region: BoundingRegion
    points: List[Tuple[float, float]]
    target_width: int
    target_height: int

    def to_dict(self) -> dict:
        return {
            "region": self.region.to_dict(),
            "points": [[x, y] for x, y in self.points],
            "target_width": self.target_width,
            "target_height": self.target_height,
        }


@dataclass(frozen=True)
class PipelineOutput:
    """Per-frame result handed to the presentation layer"""
    state: PipelineState
    emotion: Optional[EmotionResult] = None
    eye_state: EyeState = EyeState.UNKNOWN
    landmarks: List[Landmark] = field(default_factory=list)
    region: Optional[BoundingRegion] = None
    source_width: int = 0
    source_height: int = 0
    mapped: Optional[MappedGeometry] = None
    error: Optional[str] = None
    frame_index: int = 0
    processing_time_ms: int = 0

    @classmethod
    def idle(cls) -> "PipelineOutput":
        return cls(state=PipelineState.IDLE)

    @classmethod
    def no_face(cls, eye_state: EyeState = EyeState.UNKNOWN, frame_index: int = 0,
                processing_time_ms: int = 0) -> "PipelineOutput":
        return cls(
            state=PipelineState.NO_FACE,
            eye_state=eye_state,
            frame_index=frame_index,
            processing_time_ms=processing_time_ms,
        )

    @classmethod
    def failed(cls, message: str) -> "PipelineOutput":
        return cls(state=PipelineState.ERROR, error=message)

    @property
    def face_detected(self) -> bool:
        return self.state is PipelineState.FACE_DETECTED

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization"""
        return {
            "state": self.state.value,
            "face_detected": self.face_detected,
            "emotion": self.emotion.to_dict() if self.emotion else None,
            "eye_state": {
                "value": self.eye_state.value,
                "label": self.eye_state.label,
                "emoji": self.eye_state.emoji,
            },
            "landmarks": [[lm.x, lm.y, lm.z] for lm in self.landmarks],
            "region": self.region.to_dict() if self.region else None,
            "source_width": self.source_width,
            "source_height": self.source_height,
            "mapped": self.mapped.to_dict() if self.mapped else None,
            "error": self.error,
            "frame_index": self.frame_index,
            "processing_time_ms": self.processing_time_ms,
        }


class Frame:
    """A captured image plus the buffer release hook of its source.

    The pipeline releases every frame exactly once, whether the frame is
    processed or dropped.
    """

    def __init__(
        self,
        image: np.ndarray,
        timestamp: Optional[float] = None,
        on_release: Optional[Callable[[], None]] = None,
    ):
        self.image = image
        self.timestamp = timestamp if timestamp is not None else time.time()
        self._on_release = on_release
        self.released = False

    def release(self):
        if self.released:
            return
        self.released = True
        self.image = None
        if self._on_release is not None:
            self._on_release()

    def __enter__(self) -> "Frame":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()


@dataclass
class PipelineStats:
    """Frame counters for one capture session"""
    frames_received: int = 0
    frames_processed: int = 0
    frames_dropped: int = 0
    faces_detected: int = 0

    def to_dict(self) -> dict:
        return {
            "frames_received": self.frames_received,
            "frames_processed": self.frames_processed,
            "frames_dropped": self.frames_dropped,
            "faces_detected": self.faces_detected,
        }


@dataclass
class AnalysisResult:
    """Result of a single-image analysis"""
    success: bool
    output: Optional[PipelineOutput] = None
    error: Optional[str] = None
    processing_time_ms: int = 0

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization"""
        return {
            "success": self.success,
            "result": self.output.to_dict() if self.output else None,
            "error": self.error,
            "processing_time_ms": self.processing_time_ms,
        }


@dataclass
class HealthStatus:
    """Service health status"""
    status: str
    model: str
    version: str
    mode: str = "model"

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "model": self.model,
            "version": self.version,
            "mode": self.mode,
        }
