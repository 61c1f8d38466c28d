"""
Core Infrastructure for tts-studio.

    - config.py: Configuration loading and validation
    - logging/: Structured logging with numeric levels
"""
