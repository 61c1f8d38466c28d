"""
tts-studio: Timeline & Rendering Engine for synthesized-speech projects.

A project is an ordered list of script blocks. Each block is voiced through
an external voice-synthesis service (one text at a time or in batches per
voice), placed on a single-lane timeline, and finally mixed down offline
into one 16-bit mono WAV file.

Main Pieces:
    - timeline: ScriptBlock model, Timeline container, reflow pass
    - services: GenerationOrchestrator (single and batched generation)
    - audio: asset handles, duration probing, offline mixer, renderer
    - client: voice-service protocol and its httpx implementation

Example Usage:
    >>> from tts_studio.timeline import Timeline
    >>> from tts_studio.services import GenerationOrchestrator
    >>> from tts_studio.audio import AssetStore, AudioRenderer
    >>>
    >>> timeline = Timeline(global_voice="narrator")
    >>> block = timeline.add_block()
    >>> block.text = "Hello there"
    >>> orchestrator = GenerationOrchestrator(timeline, client, AssetStore())
    >>> await orchestrator.generate_batch()
    >>> path = await AudioRenderer().export(timeline)
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
