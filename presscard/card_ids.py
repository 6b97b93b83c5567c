"""
Card ID allocation

Two strategies share the allocate() contract:

    RandomNumericAllocator  print-only cards, 7-9 digit numbers
    TimestampAllocator      minted cards, "<PREFIX>-<base36 milliseconds>"

Both re-read the stored IDs on every call, reserve the ID they hand out so
no concurrent issuance can get it too, and give up with AllocationExhausted
after a bounded number of attempts. Callers release the reservation if the
issuance fails before its record is stored.
"""

import random
import time

from presscard.card_store import card_store
from presscard.errors import AllocationExhausted

NUMERIC_ID_MIN = 1_000_000
NUMERIC_ID_SPAN = 999_000_000  # 1_000_000 .. 999_999_999

DEFAULT_MAX_ATTEMPTS = 50

_BASE36 = '0123456789abcdefghijklmnopqrstuvwxyz'


def to_base36(number):
    if number < 0:
        raise ValueError('number must be non-negative')
    if number == 0:
        return '0'
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36[remainder])
    return ''.join(reversed(digits))


class IdentifierAllocator:
    """Produces and reserves card IDs that no stored card uses yet"""

    def __init__(self, store=None, max_attempts=DEFAULT_MAX_ATTEMPTS):
        self.store = store if store is not None else card_store
        self.max_attempts = max_attempts

    def allocate(self):
        existing = self.store.existing_ids()
        for attempt in range(self.max_attempts):
            candidate = self.candidate(attempt)
            if candidate in existing:
                continue
            # False when a concurrent issuance claimed it since the read above
            if self.store.reserve(candidate):
                return candidate
        raise AllocationExhausted(
            f'No free card ID after {self.max_attempts} attempts ({self.__class__.__name__})'
        )

    def candidate(self, attempt):
        raise NotImplementedError


class RandomNumericAllocator(IdentifierAllocator):
    """Uniform random number in [1_000_000, 999_999_999]"""

    def __init__(self, store=None, max_attempts=DEFAULT_MAX_ATTEMPTS, rng=None):
        super().__init__(store, max_attempts)
        self.rng = rng or random.SystemRandom()

    def candidate(self, attempt):
        return str(NUMERIC_ID_MIN + self.rng.randrange(NUMERIC_ID_SPAN))


class TimestampAllocator(IdentifierAllocator):
    """Tagged base-36 millisecond timestamp; collisions move one millisecond ahead"""

    def __init__(self, store=None, max_attempts=DEFAULT_MAX_ATTEMPTS, prefix='KAP', clock=None):
        super().__init__(store, max_attempts)
        self.prefix = prefix
        self.clock = clock or time.time
        self._base_ms = None

    def allocate(self):
        self._base_ms = int(self.clock() * 1000)
        return super().allocate()

    def candidate(self, attempt):
        return f'{self.prefix}-{to_base36(self._base_ms + attempt)}'


def allocator_for_mode(mode, config=None):
    """Allocation strategy for an issuance mode ('print' or 'mint')"""
    config = config or {}
    max_attempts = config.get('CARD_ID_MAX_ATTEMPTS', DEFAULT_MAX_ATTEMPTS)
    if mode == 'print':
        return RandomNumericAllocator(max_attempts=max_attempts)
    if mode == 'mint':
        return TimestampAllocator(max_attempts=max_attempts, prefix=config.get('CARD_ID_PREFIX', 'KAP'))
    raise ValueError(f'Unknown issuance mode: {mode!r}')
