"""Generator for 6-digit display ids."""

import logging
import random

from card_scanner.errors import ShortIdExhaustedError
from card_scanner.storage.base import RecordRepository

logger = logging.getLogger(__name__)

MIN_SHORT_ID = 100000
MAX_SHORT_ID = 999999


class ShortIdGenerator:
    """
    Draws random 6-digit ids until one is not used by the repository.

    This is check-then-act: two writers can still race on the same
    candidate between the check and the insert.
    """

    def __init__(
        self,
        repository: RecordRepository,
        max_attempts: int = 50,
        rng: random.Random | None = None,
    ):
        """
        Initialize the generator.

        Args:
            repository: Repository checked for existing short ids.
            max_attempts: Checks to make before giving up.
            rng: Random source, injectable for tests.
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._repository = repository
        self._max_attempts = max_attempts
        self._rng = rng or random.Random()

    def generate(self) -> int:
        """
        Return a short id not currently present in the repository.

        Raises:
            ShortIdExhaustedError: If every checked candidate was taken.
        """
        for attempt in range(1, self._max_attempts + 1):
            candidate = self._rng.randint(MIN_SHORT_ID, MAX_SHORT_ID)
            if not self._repository.short_id_exists(candidate):
                return candidate
            logger.debug("Short id %d taken (attempt %d)", candidate, attempt)

        raise ShortIdExhaustedError(
            f"No free short id found after {self._max_attempts} attempts"
        )
