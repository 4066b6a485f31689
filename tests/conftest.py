import threading
from typing import List, Optional

import numpy as np
import pytest

from emotionapi.domain.interfaces import ImageLoaderInterface, LandmarkProviderInterface
from emotionapi.domain.models import (
    BoundingRegion,
    DetectionResult,
    HealthStatus,
    Landmark,
)


class FakeProvider(LandmarkProviderInterface):
    """Returns canned detections and records calls"""

    def __init__(self, detections: Optional[List[DetectionResult]] = None, error: Exception = None):
        self.detections = detections or []
        self.error = error
        self.calls = 0
        self.closed = False
        # Set to block detect() until released
        self.gate: Optional[threading.Event] = None
        self.entered = threading.Event()

    def detect(self, image):
        self.calls += 1
        self.entered.set()
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if self.error is not None:
            raise self.error
        return list(self.detections)

    def get_health(self):
        return HealthStatus(status="ok", model="fake", version="test")

    def is_ready(self):
        return not self.closed

    def close(self):
        self.closed = True


class FakeImageLoader(ImageLoaderInterface):
    def __init__(self, image: Optional[np.ndarray] = None):
        self.image = image
        self.urls = []

    def load_from_url(self, url):
        self.urls.append(url)
        return self.image

    def load_from_bytes(self, data):
        return self.image


def make_detection(blendshapes=None, landmarks=None, region=None, width=640, height=480):
    return DetectionResult(
        region=region or BoundingRegion(100, 50, 300, 250),
        landmarks=landmarks if landmarks is not None else [],
        blendshapes=blendshapes or {},
        image_width=width,
        image_height=height,
    )


@pytest.fixture
def image():
    return np.zeros((480, 640, 3), dtype=np.uint8)


@pytest.fixture
def happy_detection():
    return make_detection(
        blendshapes={
            "mouthSmileLeft": 0.9,
            "mouthSmileRight": 0.9,
            "cheekSquintLeft": 0.9,
            "cheekSquintRight": 0.9,
        },
        landmarks=[Landmark(0.25, 0.5, 0.0), Landmark(0.75, 0.25, -0.1)],
    )
