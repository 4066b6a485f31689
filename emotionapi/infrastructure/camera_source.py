"""
Webcam frame source feeding the streaming pipeline
"""
import logging
import threading
import time
from typing import Optional

import cv2

from emotionapi.application.pipeline import FramePipeline
from emotionapi.config import get_config
from emotionapi.domain.models import Frame

logger = logging.getLogger(__name__)


class WebcamFrameSource:
    """Reads frames from an OpenCV camera and submits them one at a time.

    The capture buffer is limited to one frame so a slow pipeline always
    sees the newest frame instead of a backlog.
    """

    def __init__(self, camera_index: Optional[int] = None,
                 width: Optional[int] = None, height: Optional[int] = None):
        config = get_config()
        self.camera_index = config.CAMERA_INDEX if camera_index is None else camera_index
        self.width = width or config.CAMERA_WIDTH
        self.height = height or config.CAMERA_HEIGHT

        self._cap: Optional[cv2.VideoCapture] = None
        self._thread: Optional[threading.Thread] = None
        self._pipeline: Optional[FramePipeline] = None
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self, pipeline: FramePipeline) -> bool:
        """Open the camera and start the capture thread"""
        if self._running:
            return True

        self._cap = cv2.VideoCapture(self.camera_index)
        if not self._cap.isOpened():
            self._cap.release()
            self._cap = None
            pipeline.set_error(f"Cannot open camera {self.camera_index}")
            return False

        self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        self._cap.set(cv2.CAP_PROP_BUFFERSIZE, 1)

        logger.info(f"Camera {self.camera_index} opened at "
                    f"{int(self._cap.get(cv2.CAP_PROP_FRAME_WIDTH))}x"
                    f"{int(self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT))}")

        self._pipeline = pipeline
        self._running = True
        self._thread = threading.Thread(target=self._capture_loop, daemon=True)
        self._thread.start()
        return True

    def stop(self):
        """Stop capturing and tear the pipeline session down"""
        self._running = False

        thread = self._thread
        if thread and thread.is_alive():
            thread.join(timeout=5.0)
        self._thread = None

        if self._pipeline is not None:
            self._pipeline.close()
            self._pipeline = None

        if thread is not None and thread.is_alive():
            # Still blocked in cap.read(); the loop releases the camera on exit
            logger.warning(f"Camera {self.camera_index} capture thread did not stop in time")
        self._cap = None

        logger.info(f"Camera {self.camera_index} stopped")

    def _capture_loop(self):
        """Main capture loop, owns the capture device until it exits"""
        cap = self._cap
        pipeline = self._pipeline
        try:
            while self._running and not pipeline.is_closed and cap.isOpened():
                ret, image = cap.read()
                if not ret:
                    time.sleep(0.01)
                    continue

                pipeline.submit(Frame(image))
        finally:
            cap.release()
            if self._thread is threading.current_thread():
                self._running = False
