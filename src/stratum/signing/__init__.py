"""Whitelists and key material."""

from ._keys import CERTIFICATE_DAYS, KEY_BITS, KeyGenerator, remove_keys
from ._whitelist import (
    DEFAULT_VALIDITY_DAYS,
    TIMESTAMP_FORMAT,
    WHITELIST_FILE_NAME,
    Whitelist,
    build_whitelist,
    certificate_fingerprint,
    parse_whitelist,
    read_whitelist,
    verify_whitelist,
    whitelist_path,
    write_whitelist,
)

__all__ = [
    "CERTIFICATE_DAYS",
    "DEFAULT_VALIDITY_DAYS",
    "KEY_BITS",
    "TIMESTAMP_FORMAT",
    "WHITELIST_FILE_NAME",
    "KeyGenerator",
    "Whitelist",
    "build_whitelist",
    "certificate_fingerprint",
    "parse_whitelist",
    "read_whitelist",
    "remove_keys",
    "verify_whitelist",
    "whitelist_path",
    "write_whitelist",
]
