import random

from typing import List, Optional, Sequence, TypeVar

T = TypeVar("T")


def fisher_yates_shuffle(
    items: Sequence[T],
    *,
    rng: Optional[random.Random] = None,
    seed: Optional[int] = None,
) -> List[T]:
    """Return a uniformly shuffled copy of ``items``.

    The input is left untouched. Pass ``rng`` to share a generator or
    ``seed`` for a deterministic order; ``rng`` wins when both are given.
    """
    rnd = rng or random.Random(seed)
    out = list(items)
    for i in range(len(out) - 1, 0, -1):
        j = rnd.randint(0, i)
        out[i], out[j] = out[j], out[i]
    return out
