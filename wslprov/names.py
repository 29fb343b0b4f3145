"""Random instance id generation."""

import random
import string
from collections.abc import Iterable

ID_LENGTH = 10
ID_ALPHABET = string.ascii_letters


def random_id(rng: random.Random | None = None, length: int = ID_LENGTH) -> str:
    rng = rng or random.SystemRandom()
    return "".join(rng.choice(ID_ALPHABET) for _ in range(length))


def generate_instance_id(
    existing: Iterable[str],
    prefix: str = "",
    rng: random.Random | None = None
) -> str:
    """
    Generate an instance id that does not clash with an existing instance.

    Args:
        existing: Names of the instances currently known to wsl
        prefix: Namespace prefix the id is combined with to form a name
        rng: Random source, injectable for deterministic tests

    Returns:
        A 10-letter id whose prefixed name is not in existing
    """
    taken = set(existing)
    while True:
        candidate = random_id(rng)
        if f"{prefix}{candidate}" not in taken:
            return candidate
