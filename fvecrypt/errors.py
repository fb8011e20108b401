"""Error codes and exceptions raised by the volume encryption routines."""

from __future__ import annotations

from enum import IntEnum


class ErrorCode(IntEnum):
    """High-level result codes of the volume encryption library."""

    SUCCESS = 0
    ALLOC = -1
    FILE_OPEN = -2
    FILE_CLOSE = -3
    FILE_READ = -4
    FILE_WRITE = -5
    FILE_SEEK = -6

    VOLUME_NOT_GIVEN = -10
    VOLUME_HEADER_READ = -11
    VOLUME_HEADER_CHECK = -12
    VOLUME_SIZE_NOT_FOUND = -13
    VOLUME_STATE_NOT_SAFE = -14
    VOLUME_READ_ONLY = -15

    METADATA_OFFSET = -20
    METADATA_CHECK = -21
    METADATA_VERSION_UNSUPPORTED = -22
    METADATA_FILE_SIZE_NOT_FOUND = -23
    METADATA_FILE_OVERWRITE = -24
    DATASET_CHECK = -25
    VMK_RETRIEVAL = -26
    FVEK_RETRIEVAL = -27
    VIRTUALIZATION_INFO_DATUM_NOT_FOUND = -28

    CRYPTO_INIT = -40
    CRYPTO_ALGORITHM_UNSUPPORTED = -41

    MUTEX_INIT = -50
    MUTEX_LOCK = -51
    MUTEX_UNLOCK = -52

    OFFSET_OUT_OF_BOUND = -60

    NOT_INITIALIZED = -100
    ENCRYPTION_ERROR = -101
    NO_WRITE_ON_METADATA = -102
    INVALID_ARGUMENT = -103


class DislockerError(Exception):
    """Base exception carrying an :class:`ErrorCode`."""

    default_code = ErrorCode.ENCRYPTION_ERROR

    def __init__(self, code=None, message=None):
        self.code = ErrorCode(self.default_code if code is None else code)
        if message is None:
            message = self.code.name.replace("_", " ").lower()
        self.message = message
        super().__init__(message)


class UnsupportedAlgorithmError(DislockerError):
    """Raised when a cipher identifier is not one the library handles."""

    default_code = ErrorCode.CRYPTO_ALGORITHM_UNSUPPORTED

    def __init__(self, algorithm):
        self.algorithm = algorithm
        super().__init__(
            ErrorCode.CRYPTO_ALGORITHM_UNSUPPORTED,
            f"Algo not supported: {algorithm:#x}",
        )


class InvalidArgumentError(DislockerError, ValueError):
    """Raised when a routine is handed missing or malformed arguments."""

    default_code = ErrorCode.INVALID_ARGUMENT


class MacMismatchError(DislockerError):
    """Raised when a decrypted key does not authenticate against its MAC."""

    default_code = ErrorCode.ENCRYPTION_ERROR