"""24-char hex object ids.

Layout: 4-byte big-endian unix timestamp, 5 random bytes (fixed per
process), 3-byte counter. Sorting ids approximates insertion order.
"""

from __future__ import annotations

import itertools
import os
import random
import re
import threading
import time

_OBJECT_ID_RE = re.compile(r"^[0-9a-fA-F]{24}$")

_PROCESS_BYTES = os.urandom(5)
_counter = itertools.count(random.randint(0, 0x7FFFFF))
_lock = threading.Lock()


def new_object_id() -> str:
    with _lock:
        count = next(_counter) & 0xFFFFFF
    ts = int(time.time()) & 0xFFFFFFFF
    return (ts.to_bytes(4, "big") + _PROCESS_BYTES + count.to_bytes(3, "big")).hex()


def is_valid_object_id(value: object) -> bool:
    return isinstance(value, str) and _OBJECT_ID_RE.match(value) is not None
