import time
from typing import Optional, Sequence, TypeVar

T = TypeVar("T")

MASK32 = 0xFFFFFFFF
# xorshift never leaves an all-zero state
ZERO_SEED_REPLACEMENT = 0x9E3779B9


class SeededRandom:
    """
    Xorshift32 generator. Same seed -> same sequence, so every worker can be
    replayed on its own by reusing base_seed + worker_id.
    """
    def __init__(self, seed: Optional[int] = None):
        if seed is None:
            seed = int(time.time() * 1000)
        self.seed = (seed & MASK32) or ZERO_SEED_REPLACEMENT

    def next(self) -> float:
        x = self.seed
        x ^= (x << 13) & MASK32
        x ^= x >> 17
        x ^= (x << 5) & MASK32
        self.seed = x
        return x / 4294967296

    def random(self) -> float:
        return self.next()

    def random_int(self, lo: int, hi: int) -> int:
        """Inclusive on both ends."""
        return int(self.next() * (hi - lo + 1)) + lo

    def random_choice(self, seq: Sequence[T]) -> T:
        return seq[int(self.next() * len(seq))]
