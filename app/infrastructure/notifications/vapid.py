"""VAPID key pair generation for Web Push.

Run ``python -m infrastructure.notifications.vapid`` from the ``app``
directory to print a fresh key pair as environment variables.
"""

from typing import Dict

from cryptography.hazmat.primitives import serialization
from py_vapid import Vapid
from py_vapid.utils import b64urlencode


def generate_vapid_keys() -> Dict[str, str]:
    """Generate a P-256 VAPID key pair.

    Returns:
        Dict with base64url ``public_key`` (uncompressed point, the value the
        browser's ``applicationServerKey`` expects) and ``private_key`` (raw
        32-byte scalar, accepted by pywebpush).
    """
    vapid = Vapid()
    vapid.generate_keys()

    public_bytes = vapid.public_key.public_bytes(
        serialization.Encoding.X962,
        serialization.PublicFormat.UncompressedPoint,
    )
    private_bytes = vapid.private_key.private_numbers().private_value.to_bytes(
        32, "big"
    )
    return {
        "public_key": b64urlencode(public_bytes),
        "private_key": b64urlencode(private_bytes),
    }


def main() -> None:
    keys = generate_vapid_keys()
    print("VAPID keys generated. Add them to your .env file:")
    print(f"VAPID_PUBLIC_KEY={keys['public_key']}")
    print(f"VAPID_PRIVATE_KEY={keys['private_key']}")
    print("VAPID_SUBJECT=mailto:admin@example.com")


if __name__ == "__main__":
    main()
