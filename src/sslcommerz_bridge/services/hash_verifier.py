"""Verification of the optional SSLCommerz notification signature.

SSLCommerz signs a notification by listing the signed field names in
verify_key and putting the signature in verify_sign:

    md5("k1=v1&k2=v2&...&store_passwd=<md5(store password)>")

with the pairs sorted by key. Both fields are optional on the processor
side. When neither is present the check is skipped and the notification
counts as valid, which leaves the validation API as the only guard for
such deliveries.
"""

import hashlib
import hmac
from typing import Mapping

from ..utils.sanitize import sanitize_key

VERIFY_KEY_FIELD = "verify_key"
VERIFY_SIGN_FIELD = "verify_sign"
SECRET_FIELD = "store_passwd"


def md5_hex(value: str) -> str:
    """Hex MD5 digest of a UTF-8 string."""
    return hashlib.md5(value.encode("utf-8")).hexdigest()


def build_hash_string(
    fields: Mapping[str, object], signed_keys: str, store_password_hash: str
) -> str:
    """Build the sorted key=value string SSLCommerz signs.

    Args:
        fields: Notification fields
        signed_keys: Comma-separated field names from verify_key
        store_password_hash: MD5 hex digest of the store password

    Returns:
        The '&'-joined string to digest
    """
    signed: dict[str, str] = {}
    for raw_key in signed_keys.split(","):
        key = sanitize_key(raw_key)
        value = fields.get(key)
        if key and isinstance(value, str):
            signed[key] = value

    signed[SECRET_FIELD] = store_password_hash
    return "&".join(f"{key}={signed[key]}" for key in sorted(signed))


def verify_hash(fields: Mapping[str, object], store_password_hash: str) -> bool:
    """Check a notification's verify_sign against its signed fields.

    Args:
        fields: Sanitised notification fields
        store_password_hash: MD5 hex digest of the store password

    Returns:
        True when the signature matches or no signature fields were sent
    """
    if VERIFY_SIGN_FIELD not in fields and VERIFY_KEY_FIELD not in fields:
        return True

    signed_keys = fields.get(VERIFY_KEY_FIELD)
    signature = fields.get(VERIFY_SIGN_FIELD)
    if not isinstance(signed_keys, str) or not isinstance(signature, str):
        return False

    expected = md5_hex(build_hash_string(fields, signed_keys, store_password_hash))
    return hmac.compare_digest(expected.encode("ascii"), signature.encode("utf-8"))
