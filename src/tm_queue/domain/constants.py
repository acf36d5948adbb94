"""Matchmaking constants."""

# A queue entry older than this is never picked as a partner
QUEUE_TTL_SECONDS = 45

# Grace period for both clients to load the puzzle before the clock starts
MATCH_START_DELAY_SECONDS = 5

MATCH_MAX_DURATION_SECONDS = 85

# Puzzle ids are "cls:<n>" for n in [PUZZLE_NUMBER_MIN, PUZZLE_NUMBER_MAX]
PUZZLE_ID_PREFIX = "cls:"
PUZZLE_NUMBER_MIN = 20
PUZZLE_NUMBER_MAX = 302
EXCLUDED_PUZZLE_IDS: frozenset[str] = frozenset({"cls:37", "cls:51"})
