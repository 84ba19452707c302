

from __future__ import annotations


class SaveStateError(ValueError):
    """Persisted game state is missing keys or holds out-of-range values."""
