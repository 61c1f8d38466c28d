"""
tts-studio Services Layer.

    - generation.py: GenerationOrchestrator (single and batched generation)
    - responses.py: Batch response shape classification
"""
from .generation import BatchReport, GenerationOrchestrator, chunk_targets
from .responses import BatchResponse, ResponseShape, classify_batch_response, extract_audio_payload

__all__ = [
    "BatchReport",
    "BatchResponse",
    "GenerationOrchestrator",
    "ResponseShape",
    "chunk_targets",
    "classify_batch_response",
    "extract_audio_payload",
]
