"""Repository whitelist: the time-limited trust document.

A whitelist asserts which signing certificate is valid for a repository
until a fixed expiry. Layout::

    20261019120000              issued (UTC)
    E20261118120000             expires (UTC)
    Nacme.example.org           repository name
    4F:1A:...:9C                SHA-1 fingerprint of the certificate
    --
    <sha1 hex of the lines above>
    <signature of the hex digest by the master key>
"""

import hashlib
from dataclasses import dataclass
from pathlib import Path

import pendulum
from cryptography import x509
from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ed25519, padding, rsa

from stratum.exceptions import SigningError
from stratum.utils import write_atomic

WHITELIST_FILE_NAME = ".cvmfswhitelist"
TIMESTAMP_FORMAT = "YYYYMMDDHHmmss"
DEFAULT_VALIDITY_DAYS = 30
SEPARATOR = b"--\n"


@dataclass(frozen=True, slots=True)
class Whitelist:
    """Parsed whitelist.

    Attributes:
        issued: Issue time (UTC).
        expires: Expiry time (UTC).
        name: Repository name.
        fingerprint: Certificate fingerprint, colon separated upper-case hex.
        digest: SHA-1 hex digest of the body.
        signature: Raw signature bytes over the digest.
        body: The signed body.
    """

    issued: pendulum.DateTime
    expires: pendulum.DateTime
    name: str
    fingerprint: str
    digest: str
    signature: bytes
    body: bytes

    def is_valid_at(self, moment: pendulum.DateTime) -> bool:
        """Return True if ``moment`` falls within the validity window."""
        return self.issued <= moment < self.expires

    @property
    def expired(self) -> bool:
        return not self.is_valid_at(pendulum.now("UTC"))


def certificate_fingerprint(certificate_pem: bytes) -> str:
    """Return the SHA-1 fingerprint of a PEM certificate.

    Raises:
        SigningError: If the certificate cannot be loaded.
    """
    try:
        certificate = x509.load_pem_x509_certificate(certificate_pem)
    except ValueError as e:
        msg = f"Cannot load certificate: {e}"
        raise SigningError(msg) from e
    raw = certificate.fingerprint(hashes.SHA1())  # noqa: S303
    return ":".join(f"{byte:02X}" for byte in raw)


def _load_private_key(
    pem: bytes,
) -> rsa.RSAPrivateKey | ed25519.Ed25519PrivateKey:
    try:
        key = serialization.load_pem_private_key(pem, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        msg = f"Cannot load master key: {e}"
        raise SigningError(msg) from e
    if not isinstance(key, rsa.RSAPrivateKey | ed25519.Ed25519PrivateKey):
        msg = f"Unsupported master key type {type(key).__name__}"
        raise SigningError(msg)
    return key


def _load_public_key(pem: bytes) -> rsa.RSAPublicKey | ed25519.Ed25519PublicKey:
    try:
        key = serialization.load_pem_public_key(pem)
    except (ValueError, UnsupportedAlgorithm) as e:
        msg = f"Cannot load master public key: {e}"
        raise SigningError(msg) from e
    if not isinstance(key, rsa.RSAPublicKey | ed25519.Ed25519PublicKey):
        msg = f"Unsupported master key type {type(key).__name__}"
        raise SigningError(msg)
    return key


def build_whitelist(
    name: str,
    certificate_pem: bytes,
    master_key_pem: bytes,
    *,
    now: pendulum.DateTime | None = None,
    days: int = DEFAULT_VALIDITY_DAYS,
) -> bytes:
    """Build and sign a whitelist.

    Args:
        name: Repository name.
        certificate_pem: Repository signing certificate.
        master_key_pem: Unencrypted master private key (RSA or Ed25519).
        now: Issue time, defaults to the current UTC time.
        days: Validity window in days.

    Returns:
        The whitelist document.

    Raises:
        SigningError: If the key material cannot be used.
    """
    issued = (now or pendulum.now("UTC")).in_timezone("UTC")
    expires = issued.add(days=days)
    body = (
        f"{issued.format(TIMESTAMP_FORMAT)}\n"
        f"E{expires.format(TIMESTAMP_FORMAT)}\n"
        f"N{name}\n"
        f"{certificate_fingerprint(certificate_pem)}\n"
    ).encode()
    digest = hashlib.sha1(body).hexdigest().encode()  # noqa: S324

    key = _load_private_key(master_key_pem)
    if isinstance(key, rsa.RSAPrivateKey):
        signature = key.sign(digest, padding.PKCS1v15(), hashes.SHA1())  # noqa: S303
    else:
        signature = key.sign(digest)

    return body + SEPARATOR + digest + b"\n" + signature


def _parse_timestamp(value: str, field: str) -> pendulum.DateTime:
    try:
        return pendulum.from_format(value, TIMESTAMP_FORMAT, tz="UTC")
    except ValueError as e:
        msg = f"Malformed whitelist: bad {field} timestamp '{value}'"
        raise SigningError(msg) from e


def parse_whitelist(data: bytes) -> Whitelist:
    """Parse a whitelist document without verifying its signature.

    Raises:
        SigningError: If the document is malformed or its digest is wrong.
    """
    body, separator, trailer = data.partition(SEPARATOR)
    if not separator:
        msg = "Malformed whitelist: missing '--' separator"
        raise SigningError(msg)

    lines = body.decode(errors="replace").splitlines()
    if len(lines) < 4:  # noqa: PLR2004
        msg = "Malformed whitelist: expected issued, expiry, name and fingerprint"
        raise SigningError(msg)
    issued_line, expires_line, name_line, fingerprint = lines[:4]
    if not expires_line.startswith("E") or not name_line.startswith("N"):
        msg = "Malformed whitelist: expiry or name line missing its prefix"
        raise SigningError(msg)

    digest, newline, signature = trailer.partition(b"\n")
    if not newline:
        msg = "Malformed whitelist: missing digest line"
        raise SigningError(msg)
    expected = hashlib.sha1(body).hexdigest()  # noqa: S324
    if digest.decode(errors="replace") != expected:
        msg = "Whitelist digest does not match its content"
        raise SigningError(msg)

    return Whitelist(
        issued=_parse_timestamp(issued_line, "issued"),
        expires=_parse_timestamp(expires_line[1:], "expiry"),
        name=name_line[1:],
        fingerprint=fingerprint,
        digest=expected,
        signature=signature,
        body=body,
    )


def verify_whitelist(data: bytes, master_public_key_pem: bytes) -> Whitelist:
    """Parse a whitelist and verify its signature.

    Raises:
        SigningError: If the document is malformed or the signature is bad.
    """
    whitelist = parse_whitelist(data)
    key = _load_public_key(master_public_key_pem)
    digest = whitelist.digest.encode()
    try:
        if isinstance(key, rsa.RSAPublicKey):
            key.verify(
                whitelist.signature,
                digest,
                padding.PKCS1v15(),
                hashes.SHA1(),  # noqa: S303
            )
        else:
            key.verify(whitelist.signature, digest)
    except InvalidSignature as e:
        msg = f"Whitelist signature of '{whitelist.name}' does not verify"
        raise SigningError(msg) from e
    return whitelist


def whitelist_path(storage_dir: Path) -> Path:
    """Return where a repository's whitelist is published."""
    return storage_dir / WHITELIST_FILE_NAME


def write_whitelist(storage_dir: Path, data: bytes) -> Path:
    """Publish a whitelist into a repository's storage.

    Returns:
        The path written.
    """
    path = whitelist_path(storage_dir)
    write_atomic(path, data)
    return path


def read_whitelist(storage_dir: Path) -> Whitelist | None:
    """Return the parsed whitelist of a repository, None if there is none."""
    path = whitelist_path(storage_dir)
    if not path.is_file():
        return None
    return parse_whitelist(path.read_bytes())
