"""
Block Identifier Generation.

The timeline never probes for randomness sources itself; an IdGenerator is
picked once (default_id_generator) and injected. secure_ids() draws from
the OS entropy pool; pseudo_ids() is a seeded fallback for environments
without one, and gives reproducible ids in tests.
"""
from __future__ import annotations

import os
import random
import uuid
from typing import Callable, Optional

IdGenerator = Callable[[], str]


def secure_ids() -> IdGenerator:
    """uuid4 strings backed by os.urandom."""
    def _next() -> str:
        return str(uuid.uuid4())
    return _next


def pseudo_ids(seed: Optional[int] = None) -> IdGenerator:
    """uuid4-shaped strings from a private random.Random instance."""
    rng = random.Random(seed)

    def _next() -> str:
        return str(uuid.UUID(int=rng.getrandbits(128), version=4))
    return _next


def default_id_generator() -> IdGenerator:
    """Pick the strongest generator this process supports."""
    try:
        os.urandom(16)
    except NotImplementedError:
        return pseudo_ids()
    return secure_ids()
