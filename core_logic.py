import os
import logging
from logging.handlers import RotatingFileHandler
from typing import Optional

# --- LOGGING SETUP ---

LOGGER_NAME = "humanid"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'

logger = logging.getLogger(LOGGER_NAME)


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> logging.Logger:
    """Configure the shared logger with a console handler and optional rotation"""
    logger.setLevel(level)

    if not logger.handlers:
        formatter = logging.Formatter(LOG_FORMAT)

        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

        if log_file:
            log_dir = os.path.dirname(log_file)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=10_485_760,
                backupCount=5
            )
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger

# --- CUSTOM EXCEPTIONS ---

class HumanIDError(Exception):
    """Base class for every error raised by the codec."""


class ConfigurationError(HumanIDError, ValueError):
    """Word lists, seed or cipher key cannot build a generator."""


class DomainError(HumanIDError, ValueError):
    """A value falls outside the representable domain."""


class InvalidAdjectiveCountError(DomainError):
    def __init__(self, adjectives_count: int):
        super().__init__(f"must use at least 1 adjective, got {adjectives_count}")
        self.adjectives_count = adjectives_count


class IndexOutOfRangeError(DomainError):
    def __init__(self, index: int, max_index: int):
        super().__init__(f"index {index} out of bounds (max {max_index - 1})")
        self.index = index
        self.max_index = max_index


class CombinationOverflowError(HumanIDError, OverflowError):
    def __init__(self, adjectives_count: int):
        super().__init__(
            f"combinations for {adjectives_count} adjectives do not fit in 64 bits"
        )
        self.adjectives_count = adjectives_count


class UnknownWordError(HumanIDError, LookupError):
    kind = "word"

    def __init__(self, word: str):
        super().__init__(f"{self.kind} {word!r} not found")
        self.word = word


class UnknownAdjectiveError(UnknownWordError):
    kind = "adjective"


class UnknownNounError(UnknownWordError):
    kind = "noun"


class FormatError(HumanIDError, ValueError):
    """The ID has too few tokens to hold an adjective and a noun."""


class SearchExhaustedError(HumanIDError, LookupError):
    """No preimage in the domain reduces to the scrambled value."""
