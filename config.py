import os
from typing import Optional

# ============================================================================
# HELPERS
# ============================================================================

_DATA_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "data")


def parse_bool(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes", "on")


def parse_cipher_key(value: Optional[str]) -> Optional[tuple[int, int, int, int]]:
    """Parses 'w0,w1,w2,w3' (decimal or 0x-prefixed hex) into four 32-bit words."""
    if value is None or not value.strip():
        return None
    words = [part.strip() for part in value.split(",")]
    if len(words) != 4:
        raise ValueError("CIPHER_KEY must contain exactly 4 comma-separated words")
    key = tuple(int(word, 0) for word in words)
    if any(not 0 <= word <= 0xFFFFFFFF for word in key):
        raise ValueError("CIPHER_KEY words must be 32-bit unsigned integers")
    return key

# ============================================================================
# CONFIGURATION CLASS
# ============================================================================

class Config:
    """Centralized configuration with validation"""
    # Word lists
    ADJECTIVES_FILE: str = os.getenv("HUMANID_ADJECTIVES_FILE", os.path.join(_DATA_DIR, "adjectives.txt"))
    NOUNS_FILE: str = os.getenv("HUMANID_NOUNS_FILE", os.path.join(_DATA_DIR, "nouns.txt"))

    # Shuffling and scrambling
    SEED: int = int(os.getenv("HUMANID_SEED", "100"))
    NONDETERMINISTIC: bool = parse_bool(os.getenv("HUMANID_NONDETERMINISTIC"))
    CIPHER_KEY_RAW: Optional[str] = os.getenv("HUMANID_CIPHER_KEY")

    # Domain limits
    DEFAULT_ADJECTIVES: int = int(os.getenv("HUMANID_DEFAULT_ADJECTIVES", "2"))
    MAX_ADJECTIVES: int = int(os.getenv("HUMANID_MAX_ADJECTIVES", "8"))
    MAX_SCRAMBLED_SEARCH_DOMAIN: int = int(os.getenv("HUMANID_MAX_SCRAMBLED_SEARCH_DOMAIN", "100000"))

    # Rate limiting
    RATE_LIMIT_ENCODE: str = os.getenv("HUMANID_RATE_LIMIT_ENCODE", "60/minute")
    RATE_LIMIT_DECODE: str = os.getenv("HUMANID_RATE_LIMIT_DECODE", "60/minute")
    RATE_LIMIT_SCRAMBLED_DECODE: str = os.getenv("HUMANID_RATE_LIMIT_SCRAMBLED_DECODE", "5/minute")
    RATE_LIMIT_COMBINATIONS: str = os.getenv("HUMANID_RATE_LIMIT_COMBINATIONS", "120/minute")

    # Logging
    LOG_LEVEL: str = os.getenv("HUMANID_LOG_LEVEL", "INFO").upper()
    LOG_FILE: Optional[str] = os.getenv("HUMANID_LOG_FILE")

    @classmethod
    def validate(cls):
        """Validate configuration on startup"""
        for path in (cls.ADJECTIVES_FILE, cls.NOUNS_FILE):
            if not os.path.isfile(path):
                raise ValueError(f"Word list file not found: {path}")
        if cls.MAX_ADJECTIVES < 1:
            raise ValueError("MAX_ADJECTIVES must be at least 1")
        if not 1 <= cls.DEFAULT_ADJECTIVES <= cls.MAX_ADJECTIVES:
            raise ValueError("DEFAULT_ADJECTIVES must be between 1 and MAX_ADJECTIVES")
        if cls.MAX_SCRAMBLED_SEARCH_DOMAIN < 1:
            raise ValueError("MAX_SCRAMBLED_SEARCH_DOMAIN must be positive")
        parse_cipher_key(cls.CIPHER_KEY_RAW)

# ============================================================================
# SINGLETON INSTANCE & DERIVED CONSTANTS
# ============================================================================

config = Config()

# --- Expose class attributes as module constants for convenience ---
for attr in [a for a in dir(config) if not a.startswith('__') and not callable(getattr(config, a))]:
    globals()[attr] = getattr(config, attr)

# Adjective counts whose combination totals are computed at startup
PRECOMPUTE_ADJECTIVE_COUNTS: tuple[int, ...] = tuple(range(1, config.MAX_ADJECTIVES + 1))

config.PRECOMPUTE_ADJECTIVE_COUNTS = PRECOMPUTE_ADJECTIVE_COUNTS
