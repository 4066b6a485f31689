"""
Domain interfaces (ports)
"""
from abc import ABC, abstractmethod
from typing import List, Optional
import numpy as np

from .models import DetectionResult, HealthStatus


class LandmarkProviderInterface(ABC):
    """Interface for the face landmark/blendshape engine"""

    @abstractmethod
    def detect(self, image: np.ndarray) -> List[DetectionResult]:
        """Detect at most one face in a BGR image; never raises"""
        pass

    @abstractmethod
    def get_health(self) -> HealthStatus:
        """Get provider health status"""
        pass

    @abstractmethod
    def is_ready(self) -> bool:
        """Check if the provider can serve detections"""
        pass

    @abstractmethod
    def close(self):
        """Release the underlying model"""
        pass


class ImageLoaderInterface(ABC):
    """Interface for image loading"""

    @abstractmethod
    def load_from_url(self, url: str) -> Optional[np.ndarray]:
        """Load image from URL"""
        pass

    @abstractmethod
    def load_from_bytes(self, data: bytes) -> Optional[np.ndarray]:
        """Load image from bytes"""
        pass
