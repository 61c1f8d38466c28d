"""
Utility Modules for tts-studio.

    - audio.py: Audio decoding, base64 payloads, 16-bit PCM WAV encoding
    - timeit.py: Performance measurement utilities
"""
