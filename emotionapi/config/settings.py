"""
Application configuration settings
"""
import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    """Base configuration"""
    # Flask
    DEBUG = os.getenv("DEBUG", "false").lower() == "true"
    HOST = os.getenv("HOST", "0.0.0.0")
    PORT = int(os.getenv("PORT", 5000))

    # MediaPipe FaceLandmarker settings
    MODEL_PATH = os.getenv("FACE_LANDMARKER_MODEL", "face_landmarker.task")
    MAX_FACES = 1  # Single-face mode only
    MIN_DETECTION_CONFIDENCE = float(os.getenv("MIN_DETECTION_CONFIDENCE", 0.5))
    MIN_PRESENCE_CONFIDENCE = float(os.getenv("MIN_PRESENCE_CONFIDENCE", 0.5))
    MIN_TRACKING_CONFIDENCE = float(os.getenv("MIN_TRACKING_CONFIDENCE", 0.5))

    # Processing settings
    FRAME_SAMPLE_INTERVAL = int(os.getenv("FRAME_SAMPLE_INTERVAL", 3))  # Process every Nth frame
    EMOTION_ACTIVATION_THRESHOLD = float(os.getenv("EMOTION_ACTIVATION_THRESHOLD", 0.25))
    EYE_CLOSED_THRESHOLD = float(os.getenv("EYE_CLOSED_THRESHOLD", 0.4))
    BOUNDING_BOX_PADDING = float(os.getenv("BOUNDING_BOX_PADDING", 0.1))

    # Overlay settings (0 = use source image size)
    OVERLAY_WIDTH = int(os.getenv("OVERLAY_WIDTH", 0))
    OVERLAY_HEIGHT = int(os.getenv("OVERLAY_HEIGHT", 0))
    MIRROR_OVERLAY = os.getenv("MIRROR_OVERLAY", "true").lower() == "true"  # Front camera

    # Image settings
    MAX_IMAGE_SIZE = int(os.getenv("MAX_IMAGE_SIZE", 10 * 1024 * 1024))  # 10MB
    ALLOWED_MIME_TYPES = ["image/jpeg", "image/png", "image/webp", "image/gif"]

    # Camera settings
    CAMERA_ENABLED = os.getenv("CAMERA_ENABLED", "false").lower() == "true"
    CAMERA_INDEX = int(os.getenv("CAMERA_INDEX", 0))
    CAMERA_WIDTH = int(os.getenv("CAMERA_WIDTH", 1280))
    CAMERA_HEIGHT = int(os.getenv("CAMERA_HEIGHT", 720))


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False


def get_config():
    """Get configuration based on environment"""
    env = os.getenv("FLASK_ENV", "development")
    if env == "production":
        return ProductionConfig()
    return DevelopmentConfig()
