"""
Face Emotion API - per-frame emotion and eye-state inference
"""
__version__ = "0.1.0"
