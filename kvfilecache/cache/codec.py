"""Encoding and validation of stored cache records."""

import logging

from pydantic import ValidationError

from kvfilecache.cache.models import CacheEntry


logger = logging.getLogger(__name__)


def encode_entry(entry: CacheEntry) -> str:
    """Serialize an entry to its compact JSON wire form."""
    return entry.model_dump_json(by_alias=True)


def decode_entry(raw: str) -> CacheEntry | None:
    """Parse and validate a stored record.

    Malformed JSON and schema violations both yield None; this function never
    raises for bad input.
    """
    try:
        return CacheEntry.model_validate_json(raw)
    except ValidationError as e:
        logger.debug("Rejected cache record: %d validation error(s)", e.error_count())
        return None
