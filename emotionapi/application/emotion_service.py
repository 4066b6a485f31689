"""
Emotion analysis service - application layer
"""
import logging
import time
from typing import Optional, Tuple

from emotionapi.application.pipeline import FramePipeline
from emotionapi.domain.interfaces import ImageLoaderInterface, LandmarkProviderInterface
from emotionapi.domain.models import AnalysisResult, Frame, HealthStatus

logger = logging.getLogger(__name__)


class EmotionAnalysisService:
    """Service for single-image analysis and the streaming frame session"""

    def __init__(
        self,
        provider: LandmarkProviderInterface,
        image_loader: ImageLoaderInterface,
        pipeline: Optional[FramePipeline] = None,
    ):
        self.provider = provider
        self.image_loader = image_loader
        self.pipeline = pipeline or FramePipeline(provider)

    def analyze_from_url(self, image_url: str,
                         target_size: Optional[Tuple[int, int]] = None) -> AnalysisResult:
        """Analyze a single image from a URL"""
        # Load image
        image = self.image_loader.load_from_url(image_url)
        if image is None:
            return AnalysisResult(
                success=False,
                error="Failed to load image from URL",
            )

        return self._analyze(image, target_size)

    def analyze_from_bytes(self, image_data: bytes,
                           target_size: Optional[Tuple[int, int]] = None) -> AnalysisResult:
        """Analyze a single image from bytes"""
        # Load image
        image = self.image_loader.load_from_bytes(image_data)
        if image is None:
            return AnalysisResult(
                success=False,
                error="Failed to decode image",
            )

        return self._analyze(image, target_size)

    def push_frame(self, image_data: bytes) -> AnalysisResult:
        """Feed one encoded frame into the streaming session.

        A successful result without output means the frame was dropped.
        """
        start_time = time.time()
        image = self.image_loader.load_from_bytes(image_data)
        if image is None:
            return AnalysisResult(
                success=False,
                error="Failed to decode frame",
            )

        output = self.pipeline.submit(Frame(image))
        processing_time = int((time.time() - start_time) * 1000)
        return AnalysisResult(
            success=True,
            output=output,
            processing_time_ms=processing_time,
        )

    def get_state(self) -> dict:
        """Latest session output and frame counters"""
        return {
            "result": self.pipeline.latest.to_dict(),
            "stats": self.pipeline.stats.to_dict(),
        }

    def reset(self):
        self.pipeline.reset()

    def set_target_size(self, width: int, height: int):
        self.pipeline.set_target_size(width, height)

    def get_health(self) -> HealthStatus:
        """Get service health status"""
        return self.provider.get_health()

    def is_ready(self) -> bool:
        """Check if service is ready"""
        return self.provider.is_ready() and not self.pipeline.is_closed

    def shutdown(self):
        """End the session and release the provider"""
        self.pipeline.close()
        self.provider.close()

    def _analyze(self, image, target_size: Optional[Tuple[int, int]]) -> AnalysisResult:
        start_time = time.time()
        output = self.pipeline.analyze(image, target_size)
        processing_time = int((time.time() - start_time) * 1000)
        return AnalysisResult(
            success=True,
            output=output,
            processing_time_ms=processing_time,
        )
