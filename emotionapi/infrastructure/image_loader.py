"""
Image loader implementation
"""
import logging
from typing import Optional
from io import BytesIO

import numpy as np
import cv2
import requests
from PIL import Image, ImageOps

from emotionapi.config import get_config
from emotionapi.domain.interfaces import ImageLoaderInterface

logger = logging.getLogger(__name__)


class ImageLoader(ImageLoaderInterface):
    """Decodes still images and video frames into BGR arrays"""

    def __init__(self, timeout: int = 30):
        self.config = get_config()
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({
            'User-Agent': 'EmotionAPI/1.0'
        })

    def load_from_url(self, url: str) -> Optional[np.ndarray]:
        """Load image from URL"""
        try:
            logger.info(f"Loading image from URL: {url[:100]}...")

            response = self.session.get(
                url,
                timeout=self.timeout,
                stream=True,
            )
            try:
                response.raise_for_status()

                content_type = response.headers.get('Content-Type', '')
                if not any(mt in content_type for mt in ['image/', 'octet-stream']):
                    logger.warning(f"Unexpected content type: {content_type}")

                # Check declared size before reading the body
                content_length = int(response.headers.get('Content-Length', 0))
                if content_length > self.config.MAX_IMAGE_SIZE:
                    logger.error(f"Image too large: {content_length} bytes")
                    return None

                image_data = self._read_limited(response)
                if image_data is None:
                    return None

                return self.load_from_bytes(image_data)
            finally:
                response.close()

        except requests.RequestException as e:
            logger.error(f"Failed to download image: {e}")
            return None
        except Exception as e:
            logger.error(f"Failed to load image from URL: {e}")
            return None

    def _read_limited(self, response) -> Optional[bytes]:
        """Read a streamed body, giving up once it exceeds MAX_IMAGE_SIZE"""
        chunks = []
        total = 0
        for chunk in response.iter_content(chunk_size=64 * 1024):
            total += len(chunk)
            if total > self.config.MAX_IMAGE_SIZE:
                logger.error(f"Image too large: more than {self.config.MAX_IMAGE_SIZE} bytes")
                return None
            chunks.append(chunk)
        return b"".join(chunks)

    def load_from_bytes(self, data: bytes) -> Optional[np.ndarray]:
        """Load image from bytes"""
        if not data:
            logger.error("Empty image data")
            return None

        if len(data) > self.config.MAX_IMAGE_SIZE:
            logger.error(f"Image too large: {len(data)} bytes")
            return None

        image = self._decode_image(data)
        if image is None:
            return None

        if image.shape[0] == 0 or image.shape[1] == 0:
            logger.error("Decoded image has zero size")
            return None

        return image

    def _decode_image(self, data: bytes) -> Optional[np.ndarray]:
        """Decode image bytes to a BGR numpy array"""
        try:
            # PIL first: wider format support and EXIF orientation
            pil_image = Image.open(BytesIO(data))
            pil_image = ImageOps.exif_transpose(pil_image)

            if pil_image.mode != 'RGB':
                pil_image = pil_image.convert('RGB')

            image = np.array(pil_image)
            return cv2.cvtColor(image, cv2.COLOR_RGB2BGR)

        except Exception as e:
            logger.warning(f"PIL failed, trying OpenCV: {e}")

        # Raw frame formats PIL does not know
        nparr = np.frombuffer(data, np.uint8)
        image = cv2.imdecode(nparr, cv2.IMREAD_COLOR)
        if image is None:
            logger.error("OpenCV failed to decode image")
        return image
