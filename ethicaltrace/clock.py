"""
EthicalTrace Validity Clock

Block height is an external, monotonic non-decreasing counter advanced by
the host environment, never by registry logic. Registries use it three
ways:

- stamp-at-write: verification_date = now
- absolute expiry at write time: expiration_date = now + delta
- validity at read time: certified and now < expiration_date

The boundary is strict: at now == expiration_date a certification is no
longer valid.
"""

import threading
import time
from abc import ABC, abstractmethod
from typing import Optional


class Clock(ABC):
    """Source of the current block height."""

    @abstractmethod
    def now(self) -> int:
        """Return the current block height."""
        pass


class ManualClock(Clock):
    """
    Clock advanced explicitly by the host (or a test).

    Refuses to move backwards.
    """

    def __init__(self, height: int = 0):
        if height < 0:
            raise ValueError("block height must not be negative")
        self._height = height
        self._lock = threading.Lock()

    def now(self) -> int:
        with self._lock:
            return self._height

    def advance(self, blocks: int = 1) -> int:
        """Advance by a number of blocks and return the new height."""
        if blocks < 0:
            raise ValueError("cannot advance by a negative number of blocks")
        with self._lock:
            self._height += blocks
            return self._height

    def set(self, height: int) -> None:
        with self._lock:
            if height < self._height:
                raise ValueError(f"block height cannot move backwards ({self._height} -> {height})")
            self._height = height


class EpochClock(Clock):
    """
    Block height derived from wall-clock time.

    height = (now_epoch - genesis_epoch) // block_seconds, floored at 0 and
    never lower than a height already reported.
    """

    def __init__(self, genesis_epoch: int, block_seconds: int = 600):
        if block_seconds <= 0:
            raise ValueError("block_seconds must be positive")
        self.genesis_epoch = genesis_epoch
        self.block_seconds = block_seconds
        self._last = 0
        self._lock = threading.Lock()

    def now(self) -> int:
        elapsed = int(time.time()) - self.genesis_epoch
        height = max(0, elapsed // self.block_seconds)
        with self._lock:
            # wall clocks can step back; block height cannot
            if height < self._last:
                return self._last
            self._last = height
            return height


class ValidityClock:
    """Stamping, expiry and validity predicates over an injected Clock."""

    def __init__(self, clock: Optional[Clock] = None):
        self.clock = clock or ManualClock()

    def now(self) -> int:
        return self.clock.now()

    def expiry(self, delta: int) -> int:
        """Absolute block height delta blocks from now."""
        return self.now() + delta

    def is_before(self, deadline: int) -> bool:
        """Strictly before the deadline."""
        return self.now() < deadline

    def has_reached(self, deadline: int) -> bool:
        return self.now() >= deadline
