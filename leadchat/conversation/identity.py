"""
Session token generation.

A token is ``<prefix>_<epoch-ms base36>_<13 random>_<8 random>``. The time
component orders tokens minted at different moments; the two random
components, drawn from ``secrets``, make collisions between concurrent
processes negligible without any central allocator.

Usage:
    session_id = new_session_id()
    assert is_session_id(session_id)
"""

import re
import secrets
import time

from leadchat.config import settings
from leadchat.utils import BASE36_ALPHABET, to_base36

RANDOM_PART_LENGTH = 13
EXTRA_PART_LENGTH = 8


def _random_base36(length: int) -> str:
    return "".join(secrets.choice(BASE36_ALPHABET) for _ in range(length))


def new_session_id(prefix: str = settings.session.id_prefix) -> str:
    """Mint a fresh URL/JSON-safe session token."""
    timestamp = to_base36(time.time_ns() // 1_000_000)
    return (
        f"{prefix}_{timestamp}_"
        f"{_random_base36(RANDOM_PART_LENGTH)}_{_random_base36(EXTRA_PART_LENGTH)}"
    )


def is_session_id(value: str, prefix: str = settings.session.id_prefix) -> bool:
    """Check whether ``value`` has the shape produced by ``new_session_id``."""
    pattern = (
        rf"{re.escape(prefix)}_[0-9a-z]+_"
        rf"[0-9a-z]{{{RANDOM_PART_LENGTH}}}_[0-9a-z]{{{EXTRA_PART_LENGTH}}}"
    )
    return re.fullmatch(pattern, value) is not None
