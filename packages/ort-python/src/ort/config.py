"""Environment-driven defaults for ORT parsing and serialization."""

from __future__ import annotations

import os

DEFAULT_MAX_DEPTH = 64

# Maximum nesting of ( ) / [ ] groups and header child lists.
ORT_MAX_DEPTH = int(os.getenv("ORT_MAX_DEPTH", str(DEFAULT_MAX_DEPTH)))
