"""
API routes/handlers
"""
import logging
from typing import Optional, Tuple

from flask import Blueprint, request, jsonify

from emotionapi.application.emotion_service import EmotionAnalysisService

logger = logging.getLogger(__name__)

# Create blueprint
api = Blueprint('api', __name__)

# Service instance (injected)
emotion_service: EmotionAnalysisService = None


def init_routes(service: EmotionAnalysisService):
    """Initialize routes with service dependency"""
    global emotion_service
    emotion_service = service


def _not_ready():
    return jsonify({
        "success": False,
        "error": "Service not ready",
        "result": None,
    }), 503


def _bad_request(message: str):
    return jsonify({
        "success": False,
        "error": message,
        "result": None,
    }), 400


def _parse_target(source) -> Optional[Tuple[int, int]]:
    """Read optional target_width/target_height from a mapping"""
    width = source.get('target_width')
    height = source.get('target_height')
    if width is None or height is None:
        return None
    return int(width), int(height)


@api.route('/health', methods=['GET'])
def health():
    """Health check endpoint"""
    status = emotion_service.get_health()
    return jsonify(status.to_dict())


@api.route('/ready', methods=['GET'])
def ready():
    """Readiness check endpoint"""
    if emotion_service.is_ready():
        return jsonify({"ready": True})
    return jsonify({"ready": False}), 503


@api.route('/analyze', methods=['POST'])
def analyze_from_url():
    """Analyze a single image from a URL"""
    if not emotion_service.is_ready():
        return _not_ready()

    data = request.get_json(silent=True)
    if not data or 'image_url' not in data:
        return _bad_request("Missing image_url in request body")

    try:
        target_size = _parse_target(data)
    except (TypeError, ValueError):
        return _bad_request("target_width and target_height must be integers")

    result = emotion_service.analyze_from_url(data['image_url'], target_size)

    if not result.success:
        return jsonify(result.to_dict()), 500

    return jsonify(result.to_dict())


@api.route('/analyze-bytes', methods=['POST'])
def analyze_from_bytes():
    """Analyze a single image from the request body"""
    if not emotion_service.is_ready():
        return _not_ready()

    image_data = request.get_data()
    if not image_data:
        return _bad_request("No image data in request body")

    try:
        target_size = _parse_target(request.args)
    except (TypeError, ValueError):
        return _bad_request("target_width and target_height must be integers")

    result = emotion_service.analyze_from_bytes(image_data, target_size)

    if not result.success:
        return jsonify(result.to_dict()), 400

    return jsonify(result.to_dict())


@api.route('/frames', methods=['POST'])
def push_frame():
    """Push one video frame into the streaming session"""
    if not emotion_service.is_ready():
        return _not_ready()

    frame_data = request.get_data()
    if not frame_data:
        return _bad_request("No frame data in request body")

    result = emotion_service.push_frame(frame_data)

    if not result.success:
        return jsonify(result.to_dict()), 400

    if result.output is None:
        # Sampled out or dropped while another frame was in flight
        return jsonify(result.to_dict()), 202

    return jsonify(result.to_dict())


@api.route('/state', methods=['GET'])
def state():
    """Latest session output"""
    return jsonify(emotion_service.get_state())


@api.route('/reset', methods=['POST'])
def reset():
    """Reset the streaming session"""
    emotion_service.reset()
    return jsonify(emotion_service.get_state())


@api.route('/target', methods=['PUT'])
def set_target():
    """Set the overlay surface size"""
    data = request.get_json(silent=True) or {}
    try:
        target_size = _parse_target(data)
    except (TypeError, ValueError):
        target_size = None
    if target_size is None:
        return _bad_request("target_width and target_height are required integers")

    emotion_service.set_target_size(*target_size)
    return jsonify({
        "target_width": target_size[0],
        "target_height": target_size[1],
    })
