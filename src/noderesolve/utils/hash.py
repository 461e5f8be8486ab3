import hashlib


def slot_key(url: str) -> str:
    """
    returns a short sha256 hash identifying the cache slot for an index url.
    """
    if not isinstance(url, str):
        raise TypeError(f"expected str, got {type(url).__name__}")

    # trailing slashes and surrounding whitespace do not change the resource
    normalized = url.strip().rstrip("/")
    digest = hashlib.sha256(normalized.encode()).hexdigest()
    return digest[:12]  # truncate for readability
