"""Sector and key cryptography for BitLocker-style full volume encryption."""

__version__ = "0.1.0"

__all__ = [
    "aes_xts",
    "contexts",
    "crc32",
    "decrypt",
    "diffuser",
    "encommon",
    "encrypt",
    "errors",
]