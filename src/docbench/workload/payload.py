"""Synthetic record generation for insert payloads.

Every record is a JSON object with ``field1`` .. ``field10``, each holding
100 random alphanumeric characters. Each call builds its own random source,
so the generator is safe to call from any number of worker threads.
"""

from __future__ import annotations

import json
import random
import string

FIELD_COUNT = 10
FIELD_LENGTH = 100
ALPHABET = string.ascii_letters + string.digits


def random_alphanumeric(length: int, rng: random.Random | None = None) -> str:
    """Return a random string drawn from ``[A-Za-z0-9]``.

    Args:
        length: Number of characters.
        rng: Random source. A fresh, OS-seeded one is created when omitted.

    Returns:
        The random string.
    """
    rng = rng or random.Random()  # noqa: S311
    return "".join(rng.choices(ALPHABET, k=length))


def generate_record() -> str:
    """Generate one synthetic record as a JSON object string.

    Returns:
        JSON text with keys ``field1`` through ``field10`` in ascending order.
    """
    rng = random.Random()  # noqa: S311
    record = {
        f"field{i}": random_alphanumeric(FIELD_LENGTH, rng)
        for i in range(1, FIELD_COUNT + 1)
    }
    return json.dumps(record)


class PayloadGenerator:
    """Stateless record source handed to workers.

    Exists so tests and alternative workloads can substitute a different
    ``generate`` without touching the worker.
    """

    def generate(self) -> str:
        """Return a freshly generated record."""
        return generate_record()
