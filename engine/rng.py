import numpy as np

class DRNG:
    """Deterministic Random Number Generator wrapper."""

    def __init__(self, seed: int):
        self.g = np.random.Generator(np.random.PCG64(seed))

    def heights(self, width: int, low: int = 0, high: int = 4) -> np.ndarray:
        """Return a width x width grid of integer heights in [low, high)."""
        return self.g.integers(low, high, size=(width, width), dtype=np.int64)
