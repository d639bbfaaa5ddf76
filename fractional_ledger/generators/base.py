"""Base generator class for simulation data."""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from typing import Any, Iterator

from faker import Faker


class BaseGenerator(ABC):
    """Base class for simulation data generators.

    Each generator owns its Faker instance and its own ``random.Random``
    so that two generators built with the same seed produce the same
    sequence regardless of what else runs in the process.

    Parameters
    ----------
    seed : int | None
        Random seed for reproducibility.
    locale : str
        Faker locale (default ``en_US``).
    """

    def __init__(self, seed: int | None = None, locale: str = "en_US") -> None:
        self.fake = Faker(locale)
        self.rng = random.Random(seed)
        if seed is not None:
            self.fake.seed_instance(seed)

    @abstractmethod
    def generate(self) -> Any:
        """Generate one record."""

    def generate_batch(self, count: int) -> Iterator[Any]:
        """Yield ``count`` generated records."""
        for _ in range(count):
            yield self.generate()
