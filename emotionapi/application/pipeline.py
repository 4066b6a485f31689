"""
Per-frame inference pipeline - application layer

Wires frame sampler -> landmark provider -> emotion/eye-state scorers ->
coordinate mapper and publishes one PipelineOutput per processed frame.
"""
import dataclasses
import logging
import threading
import time
from typing import Callable, List, Optional, Tuple

import numpy as np

from emotionapi.domain.geometry import CoordinateMapper
from emotionapi.domain.interfaces import LandmarkProviderInterface
from emotionapi.domain.models import (
    DetectionResult,
    EyeState,
    Frame,
    PipelineOutput,
    PipelineState,
    PipelineStats,
)
from emotionapi.domain.sampler import FrameSampler
from emotionapi.domain.scoring import EmotionScorer, EyeStateScorer

logger = logging.getLogger(__name__)

OutputListener = Callable[[PipelineOutput], None]


def normalize_target_size(target_size: Optional[Tuple[int, int]]) -> Optional[Tuple[int, int]]:
    """None unless both dimensions are positive"""
    if target_size is None:
        return None
    width, height = target_size
    if width > 0 and height > 0:
        return int(width), int(height)
    return None


class FramePipeline:
    """Streaming emotion/eye-state pipeline for one capture session.

    State machine: IDLE -> NO_FACE | FACE_DETECTED on every processed frame.
    ERROR is only entered through ``set_error`` and left through ``reset``;
    frames are ignored while in ERROR. Sampled-out frames never change state.

    Only one frame is processed at a time. ``submit`` drops a frame when
    another one is still in flight; ``analyze`` waits for its turn. Every
    submitted frame is released, processed or not.
    """

    def __init__(
        self,
        provider: LandmarkProviderInterface,
        sampler: Optional[FrameSampler] = None,
        emotion_scorer: Optional[EmotionScorer] = None,
        eye_state_scorer: Optional[EyeStateScorer] = None,
        mapper: Optional[CoordinateMapper] = None,
        target_size: Optional[Tuple[int, int]] = None,
    ):
        self.provider = provider
        self.sampler = sampler or FrameSampler()
        self.emotion_scorer = emotion_scorer or EmotionScorer()
        self.eye_state_scorer = eye_state_scorer or EyeStateScorer()
        self.mapper = mapper or CoordinateMapper()
        self.stats = PipelineStats()

        self._target_size: Optional[Tuple[int, int]] = None
        self.set_target_size(*(target_size or (0, 0)))

        # Serializes provider calls
        self._provider_lock = threading.Lock()
        # Guards everything below
        self._state_lock = threading.Lock()
        self._latest = PipelineOutput.idle()
        self._eye_state = EyeState.UNKNOWN
        self._listeners: List[OutputListener] = []
        self._generation = 0
        self._closed = False

    @property
    def state(self) -> PipelineState:
        return self._latest.state

    @property
    def latest(self) -> PipelineOutput:
        """Most recently published output"""
        return self._latest

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def target_size(self) -> Optional[Tuple[int, int]]:
        return self._target_size

    def set_target_size(self, width: int, height: int):
        """Set the overlay surface size; non-positive values mean source size"""
        self._target_size = normalize_target_size((width, height))

    def subscribe(self, listener: OutputListener) -> Callable[[], None]:
        """Register a listener for published outputs; returns an unsubscribe"""
        with self._state_lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._state_lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def submit(self, frame: Frame) -> Optional[PipelineOutput]:
        """Feed one captured frame.

        Returns the published output, or None when the frame was sampled out,
        dropped because another frame is in flight, or discarded after a
        reset/teardown.
        """
        try:
            with self._state_lock:
                if self._closed:
                    return None
                frame_index, keep = self.sampler.next_frame()
                self.stats.frames_received += 1
                if not keep or self._latest.state is PipelineState.ERROR:
                    self.stats.frames_dropped += 1
                    return None
                generation = self._generation

            if not self._provider_lock.acquire(blocking=False):
                logger.debug(f"Frame {frame_index} dropped, previous frame still in flight")
                with self._state_lock:
                    self.stats.frames_dropped += 1
                return None

            try:
                output = self._evaluate(frame.image, frame_index, self._target_size)
            finally:
                self._provider_lock.release()

            return self._publish(output, generation)
        finally:
            frame.release()

    def analyze(self, image: np.ndarray,
                target_size: Optional[Tuple[int, int]] = None) -> PipelineOutput:
        """Run one image through the pipeline without sampling or publishing"""
        with self._provider_lock:
            return self._evaluate(image, 0, normalize_target_size(target_size) or self._target_size)

    def set_error(self, message: str):
        """Enter the blocking ERROR state"""
        logger.error(f"Pipeline error: {message}")
        self._transition(PipelineOutput.failed(message))

    def reset(self):
        """Return to IDLE and forget the session's progress"""
        logger.info("Resetting pipeline")
        with self._state_lock:
            self.sampler.reset()
            self.stats = PipelineStats()
            self._eye_state = EyeState.UNKNOWN
        self._transition(PipelineOutput.idle())

    def close(self):
        """Tear the session down; in-flight results are discarded"""
        with self._state_lock:
            if self._closed:
                return
            self._closed = True
            self._generation += 1
            self._listeners.clear()
        logger.info("Pipeline closed")

    def _transition(self, output: PipelineOutput):
        with self._state_lock:
            if self._closed:
                return
            # Invalidates results of frames still in flight
            self._generation += 1
            self._latest = output
            listeners = list(self._listeners)
        self._notify(listeners, output)

    def _publish(self, output: PipelineOutput, generation: int) -> Optional[PipelineOutput]:
        with self._state_lock:
            if self._closed or generation != self._generation:
                logger.debug(f"Discarding stale result for frame {output.frame_index}")
                return None

            if output.state is PipelineState.NO_FACE:
                output = dataclasses.replace(output, eye_state=self._eye_state)
            else:
                self._eye_state = output.eye_state
                self.stats.faces_detected += 1

            self.stats.frames_processed += 1
            self._latest = output
            listeners = list(self._listeners)

        self._notify(listeners, output)
        return output

    def _notify(self, listeners: List[OutputListener], output: PipelineOutput):
        for listener in listeners:
            try:
                listener(output)
            except Exception as e:
                logger.error(f"Pipeline listener failed: {e}")

    def _evaluate(self, image: np.ndarray, frame_index: int,
                  target_size: Optional[Tuple[int, int]]) -> PipelineOutput:
        start_time = time.time()
        detections = self._detect(image)

        if not detections:
            processing_time = int((time.time() - start_time) * 1000)
            return PipelineOutput.no_face(
                frame_index=frame_index,
                processing_time_ms=processing_time,
            )

        detection = detections[0]
        emotion = self.emotion_scorer.score(detection.blendshapes)
        eye_state = self.eye_state_scorer.score(detection.blendshapes)

        target_width, target_height = target_size or (detection.image_width, detection.image_height)
        mapped = self.mapper.map(
            detection.region,
            detection.landmarks,
            detection.image_width,
            detection.image_height,
            target_width,
            target_height,
        )

        processing_time = int((time.time() - start_time) * 1000)
        return PipelineOutput(
            state=PipelineState.FACE_DETECTED,
            emotion=emotion,
            eye_state=eye_state,
            landmarks=list(detection.landmarks),
            region=detection.region,
            source_width=detection.image_width,
            source_height=detection.image_height,
            mapped=mapped,
            frame_index=frame_index,
            processing_time_ms=processing_time,
        )

    def _detect(self, image: np.ndarray) -> List[DetectionResult]:
        try:
            detections = self.provider.detect(image)
        except Exception as e:
            logger.warning(f"Face detection failed, treating frame as empty: {e}")
            return []
        return list(detections or [])[:1]
