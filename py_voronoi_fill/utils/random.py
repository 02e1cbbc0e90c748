"""
Random number generation utilities.

Randomness is always carried by an explicit ``numpy.random.Generator``
handed to the stage that needs it. There is no module-level generator, so a
pattern is reproducible from its seed alone.
"""

from typing import Optional

import numpy as np


def draw_seed() -> int:
    """
    Draw a fresh seed from the operating system's entropy pool.

    The returned integer can be recorded and passed back to ``make_rng`` to
    reproduce a run that was started without an explicit seed.
    """
    return int(np.random.SeedSequence().entropy)


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    """
    Create the generator used for nucleus placement.

    Args:
        seed: Integer seed, or None to draw from OS entropy

    Returns:
        Independent numpy Generator instance
    """
    return np.random.default_rng(seed)
