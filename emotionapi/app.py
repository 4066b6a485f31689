"""
Face Emotion API - MediaPipe service
Main application entry point
"""
import logging
import sys
from typing import Optional

from flask import Flask
from flask_cors import CORS

from emotionapi.config import get_config
from emotionapi.application.emotion_service import EmotionAnalysisService
from emotionapi.application.pipeline import FramePipeline
from emotionapi.api.routes import api, init_routes
from emotionapi.domain.geometry import CoordinateMapper
from emotionapi.domain.sampler import FrameSampler
from emotionapi.domain.scoring import EmotionScorer, EyeStateScorer

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout),
    ]
)
logger = logging.getLogger(__name__)


def create_service() -> EmotionAnalysisService:
    """Build the provider, loader and pipeline from configuration"""
    # Imported here so the API can be built around other providers
    from emotionapi.infrastructure.mediapipe_provider import MediaPipeLandmarkProvider
    from emotionapi.infrastructure.image_loader import ImageLoader

    config = get_config()

    logger.info("Initializing landmark provider...")
    provider = MediaPipeLandmarkProvider()
    image_loader = ImageLoader()

    pipeline = FramePipeline(
        provider=provider,
        sampler=FrameSampler(config.FRAME_SAMPLE_INTERVAL),
        emotion_scorer=EmotionScorer(config.EMOTION_ACTIVATION_THRESHOLD),
        eye_state_scorer=EyeStateScorer(config.EYE_CLOSED_THRESHOLD),
        mapper=CoordinateMapper(mirror=config.MIRROR_OVERLAY),
        target_size=(config.OVERLAY_WIDTH, config.OVERLAY_HEIGHT),
    )

    return EmotionAnalysisService(
        provider=provider,
        image_loader=image_loader,
        pipeline=pipeline,
    )


def create_app(service: Optional[EmotionAnalysisService] = None) -> Flask:
    """Application factory"""
    config = get_config()

    # Create Flask app
    app = Flask(__name__)
    app.config['DEBUG'] = config.DEBUG

    # Enable CORS
    CORS(app)

    if service is None:
        service = create_service()

    # Initialize routes with service
    init_routes(service)
    app.extensions['emotion_service'] = service

    # Register blueprint
    app.register_blueprint(api)

    logger.info("Application initialized successfully")
    return app


def main():
    """Main entry point"""
    config = get_config()

    logger.info(f"Starting Emotion API on {config.HOST}:{config.PORT}")
    logger.info(f"Model: {config.MODEL_PATH}")
    logger.info(f"Frame sample interval: {config.FRAME_SAMPLE_INTERVAL}")

    app = create_app()
    service = app.extensions['emotion_service']

    camera = None
    if config.CAMERA_ENABLED:
        from emotionapi.infrastructure.camera_source import WebcamFrameSource

        camera = WebcamFrameSource()
        camera.start(service.pipeline)

    try:
        app.run(
            host=config.HOST,
            port=config.PORT,
            debug=config.DEBUG,
            threaded=True,
            use_reloader=False,
        )
    finally:
        if camera is not None:
            camera.stop()
        service.shutdown()


if __name__ == '__main__':
    main()
