"""
Standalone AES-256-GCM codec for sealing bearer tokens into cookie values.

This package has no dependency on other planner packages (planner.db, planner.security, etc.).
"""

from .cipher import DecryptError, TokenCipher, derive_key

__all__ = [
    "DecryptError",
    "TokenCipher",
    "derive_key",
]
