"""Random puzzle selection for new matches."""

import random

from src.tm_queue.domain.constants import (
    EXCLUDED_PUZZLE_IDS,
    PUZZLE_ID_PREFIX,
    PUZZLE_NUMBER_MAX,
    PUZZLE_NUMBER_MIN,
)

PUZZLE_POOL: tuple[str, ...] = tuple(
    puzzle_id
    for puzzle_id in (
        f"{PUZZLE_ID_PREFIX}{n}" for n in range(PUZZLE_NUMBER_MIN, PUZZLE_NUMBER_MAX + 1)
    )
    if puzzle_id not in EXCLUDED_PUZZLE_IDS
)


def random_puzzle_id(rng: random.Random | None = None) -> str:
    """Uniform pick from the puzzle range minus the exclusion list."""
    return (rng or random).choice(PUZZLE_POOL)
