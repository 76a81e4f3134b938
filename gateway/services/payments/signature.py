import hashlib
import hmac


def compute_signature(raw_payload: bytes, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), raw_payload, hashlib.sha512).hexdigest()


def verify_signature(raw_payload: bytes, signature_header: str | None, secret: str) -> bool:
    """
    Paystack signs the exact request body with HMAC-SHA512 (hex) using the
    account secret key. Always hash the raw bytes as received; a
    re-serialized JSON body does not reproduce the provider's bytes.
    """
    if not secret or not signature_header:
        return False
    expected = compute_signature(raw_payload or b"", secret)
    return hmac.compare_digest(expected.encode("ascii"), signature_header.strip().encode("utf-8"))
