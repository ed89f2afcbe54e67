"""Scrypt password hasher adapter for base64-encoded scrypt key headers.

A stored hash is the base64 text of a 96-byte header::

    "scrypt" | version (0) | logN | r (u32 BE) | p (u32 BE) | salt (32)
    | checksum (16) | signature (32)

``checksum`` is the truncated SHA-256 of the first 48 bytes and ``signature``
is HMAC-SHA256 over the first 64 bytes, keyed with the second half of a
64-byte scrypt key derived from the password.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import logging
import secrets
import struct
from dataclasses import dataclass

from commerce_auth.application.ports.password_hasher_port import PasswordHasherPort

_PREFIX = b"scrypt"
_VERSION = 0
_PARAMS = struct.Struct(">6sBBII32s")
_CHECKSUM_LENGTH = 16
_SIGNED_LENGTH = _PARAMS.size + _CHECKSUM_LENGTH
_HASH_LENGTH = _SIGNED_LENGTH + 32
_SALT_LENGTH = 32
_DERIVED_KEY_LENGTH = 64
_MAX_LOG_N = 30
_MAX_SCRYPT_MEMORY = 2**31 - 1

logger = logging.getLogger(__name__)


class MalformedPasswordHashError(ValueError):
    """Raised when a stored password hash cannot be decoded."""


@dataclass(frozen=True)
class ScryptParameters:
    """Cost parameters and salt embedded in one stored hash."""

    log_n: int
    r: int
    p: int
    salt: bytes


@dataclass(frozen=True)
class DecodedPasswordHash:
    """Stored hash split into its signed header and signature."""

    parameters: ScryptParameters
    signed_header: bytes
    signature: bytes


def decode_password_hash(password_hash: str | bytes) -> DecodedPasswordHash:
    """Decode and validate one base64 scrypt header.

    Surrounding whitespace (a trailing newline from a dump or env file) is
    ignored; anything else outside the base64 alphabet is rejected.
    """

    try:
        raw = base64.b64decode(password_hash.strip(), validate=True)
    except ValueError as exc:
        raise MalformedPasswordHashError("password hash is not valid base64") from exc

    if len(raw) != _HASH_LENGTH:
        raise MalformedPasswordHashError("password hash has unexpected length")

    prefix, version, log_n, r, p, salt = _PARAMS.unpack_from(raw)
    if prefix != _PREFIX or version != _VERSION:
        raise MalformedPasswordHashError("password hash is not a scrypt header")

    checksum = raw[_PARAMS.size:_SIGNED_LENGTH]
    expected_checksum = hashlib.sha256(raw[: _PARAMS.size]).digest()[:_CHECKSUM_LENGTH]
    if not hmac.compare_digest(checksum, expected_checksum):
        raise MalformedPasswordHashError("password hash checksum mismatch")

    parameters = ScryptParameters(log_n=log_n, r=r, p=p, salt=salt)
    _validate_parameters(parameters)
    return DecodedPasswordHash(
        parameters=parameters,
        signed_header=raw[:_SIGNED_LENGTH],
        signature=raw[_SIGNED_LENGTH:],
    )


class ScryptPasswordHasher(PasswordHasherPort):
    """Password hashing adapter using memory-hard scrypt derivation."""

    def __init__(self, *, log_n: int = 15, r: int = 8, p: int = 1) -> None:
        if not 1 <= log_n <= _MAX_LOG_N:
            raise ValueError(f"log_n must be between 1 and {_MAX_LOG_N}")
        if r < 1 or p < 1:
            raise ValueError("r and p must be positive")
        self._log_n = log_n
        self._r = r
        self._p = p

    def hash_password(self, password: str) -> str:
        parameters = ScryptParameters(
            log_n=self._log_n,
            r=self._r,
            p=self._p,
            salt=secrets.token_bytes(_SALT_LENGTH),
        )
        header = _PARAMS.pack(
            _PREFIX,
            _VERSION,
            parameters.log_n,
            parameters.r,
            parameters.p,
            parameters.salt,
        )
        signed_header = header + hashlib.sha256(header).digest()[:_CHECKSUM_LENGTH]
        signature = _sign(signed_header, _derive_key(password, parameters))
        return base64.b64encode(signed_header + signature).decode("ascii")

    def verify_password(self, *, password: str, password_hash: str | bytes) -> bool:
        try:
            decoded = decode_password_hash(password_hash)
            derived_key = _derive_key(password, decoded.parameters)
        except ValueError as exc:
            # Covers malformed headers, unencodable passwords and scrypt limits.
            logger.debug("password_hash_rejected reason=%s", exc)
            return False

        return hmac.compare_digest(_sign(decoded.signed_header, derived_key), decoded.signature)


def _validate_parameters(parameters: ScryptParameters) -> None:
    if not 1 <= parameters.log_n <= _MAX_LOG_N:
        raise MalformedPasswordHashError("scrypt logN out of range")
    if parameters.r < 1 or parameters.p < 1:
        raise MalformedPasswordHashError("scrypt r and p must be positive")


def _derive_key(password: str, parameters: ScryptParameters) -> bytes:
    n = 1 << parameters.log_n
    required_memory = 128 * parameters.r * (n + parameters.p + 2)
    return hashlib.scrypt(
        password.encode("utf-8"),
        salt=parameters.salt,
        n=n,
        r=parameters.r,
        p=parameters.p,
        maxmem=min(required_memory + 1024 * 1024, _MAX_SCRYPT_MEMORY),
        dklen=_DERIVED_KEY_LENGTH,
    )


def _sign(signed_header: bytes, derived_key: bytes) -> bytes:
    return hmac.new(derived_key[32:], signed_header, hashlib.sha256).digest()
