"""
Timeline Model.

    - models.py: ScriptBlock, BlockStatus, SourceTrim
    - timeline.py: Timeline container (ordering, selection, durations)
    - reflow.py: Single-lane overlap resolver
    - ids.py: Injected block id generators
"""
from .ids import IdGenerator, default_id_generator, pseudo_ids, secure_ids
from .models import BlockStatus, ScriptBlock, SourceTrim
from .reflow import reflow
from .timeline import Timeline

__all__ = [
    "BlockStatus",
    "IdGenerator",
    "ScriptBlock",
    "SourceTrim",
    "Timeline",
    "default_id_generator",
    "pseudo_ids",
    "reflow",
    "secure_ids",
]
