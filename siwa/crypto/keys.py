"""P-256 signing key generation and loading."""

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from siwa.core.errors import SigningKeyError
from siwa.crypto.types import SigningKeyData

KeyMaterial = str | bytes | ec.EllipticCurvePrivateKey


def generate_ec_keypair() -> SigningKeyData:
    """Generate a new P-256 keypair, PKCS8-encoded like an Apple .p8 file."""
    private_key = ec.generate_private_key(ec.SECP256R1())
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    public_pem = (
        private_key.public_key()
        .public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        .decode()
    )
    return SigningKeyData(private_key_pem=private_pem, public_key_pem=public_pem)


def load_private_key(material: KeyMaterial) -> ec.EllipticCurvePrivateKey:
    """Load a P-256 private key from PEM text, PEM bytes, or a key object."""
    if isinstance(material, ec.EllipticCurvePrivateKey):
        key = material
    else:
        if isinstance(material, str):
            material = material.encode()
        if not material or not material.strip():
            raise SigningKeyError("Private key is empty")
        try:
            loaded = serialization.load_pem_private_key(material, password=None)
        except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
            raise SigningKeyError("Private key could not be decoded") from exc
        if not isinstance(loaded, ec.EllipticCurvePrivateKey):
            raise SigningKeyError("Private key is not an elliptic-curve key")
        key = loaded

    if not isinstance(key.curve, ec.SECP256R1):
        raise SigningKeyError(f"Private key uses curve {key.curve.name}, expected P-256")
    return key
