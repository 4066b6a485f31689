"""
MediaPipe FaceLandmarker implementation of the landmark provider
"""
import os
import logging
from typing import List, Optional
import numpy as np
import cv2

import mediapipe as mp
from mediapipe.tasks.python import BaseOptions, vision

from emotionapi.config import get_config
from emotionapi.domain.geometry import compute_bounding_region, placeholder_region
from emotionapi.domain.interfaces import LandmarkProviderInterface
from emotionapi.domain.models import DetectionResult, HealthStatus, Landmark

logger = logging.getLogger(__name__)


class MediaPipeLandmarkProvider(LandmarkProviderInterface):
    """Face landmarks and blendshapes using MediaPipe FaceLandmarker"""

    def __init__(self, model_path: Optional[str] = None):
        self.config = get_config()
        self.model: Optional[vision.FaceLandmarker] = None
        self.model_loaded = False
        self.closed = False
        self.model_path = model_path or self.config.MODEL_PATH
        self.padding = self.config.BOUNDING_BOX_PADDING
        self._initialize()

    def _initialize(self):
        """Initialize the FaceLandmarker model; fall back to placeholder mode"""
        if not os.path.exists(self.model_path):
            logger.warning(f"Model not found: {self.model_path}, running in placeholder mode")
            return

        try:
            logger.info(f"Initializing FaceLandmarker model: {self.model_path}")

            options = vision.FaceLandmarkerOptions(
                base_options=BaseOptions(model_asset_path=self.model_path),
                running_mode=vision.RunningMode.IMAGE,
                num_faces=self.config.MAX_FACES,
                min_face_detection_confidence=self.config.MIN_DETECTION_CONFIDENCE,
                min_face_presence_confidence=self.config.MIN_PRESENCE_CONFIDENCE,
                min_tracking_confidence=self.config.MIN_TRACKING_CONFIDENCE,
                output_face_blendshapes=True,
            )
            self.model = vision.FaceLandmarker.create_from_options(options)

            self.model_loaded = True
            logger.info("FaceLandmarker model initialized successfully")

        except Exception as e:
            logger.warning(f"Failed to initialize FaceLandmarker, running in placeholder mode: {e}")
            self.model = None
            self.model_loaded = False

    def detect(self, image: np.ndarray) -> List[DetectionResult]:
        """Detect at most one face in a BGR image"""
        if image is None or image.ndim < 2:
            return []

        # Get image dimensions for pixel-space regions
        height, width = image.shape[:2]
        if width == 0 or height == 0 or self.closed:
            return []

        if not self.model_loaded or self.model is None:
            return [self._placeholder(width, height)]

        try:
            rgb = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
            mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb)

            result = self.model.detect(mp_image)

            detections: List[DetectionResult] = []

            for index, face_landmarks in enumerate(result.face_landmarks):
                landmarks = [Landmark(lm.x, lm.y, lm.z) for lm in face_landmarks]

                region = compute_bounding_region(landmarks, width, height, self.padding)
                if region is None:
                    continue

                blendshapes = {}
                if result.face_blendshapes and len(result.face_blendshapes) > index:
                    for category in result.face_blendshapes[index]:
                        blendshapes[category.category_name] = float(category.score)

                detections.append(DetectionResult(
                    region=region,
                    landmarks=landmarks,
                    blendshapes=blendshapes,
                    image_width=width,
                    image_height=height,
                ))

            return detections[:self.config.MAX_FACES]

        except Exception as e:
            logger.error(f"Face landmark detection failed: {e}")
            return []

    def _placeholder(self, width: int, height: int) -> DetectionResult:
        """Centered detection with no landmarks or blendshapes"""
        return DetectionResult(
            region=placeholder_region(width, height),
            landmarks=[],
            blendshapes={},
            image_width=width,
            image_height=height,
        )

    def get_health(self) -> HealthStatus:
        """Get health status"""
        return HealthStatus(
            status="ok" if self.model_loaded else "degraded",
            model=os.path.basename(self.model_path),
            version=mp.__version__,
            mode="model" if self.model_loaded else "placeholder",
        )

    def is_ready(self) -> bool:
        """Placeholder mode still serves detections"""
        return not self.closed

    def close(self):
        """Release the FaceLandmarker"""
        if self.model is not None:
            self.model.close()
            self.model = None
        self.model_loaded = False
        self.closed = True
