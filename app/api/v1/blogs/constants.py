"""Constants for public blog routes."""

DEFAULT_PAGE = 1
MAX_PAGE = 10_000

WORDS_PER_MINUTE = 200
