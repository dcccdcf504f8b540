import string
import secrets
import time

ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_transaction_id(suffix_length: int = 9) -> str:
    """Creation time in milliseconds followed by a random suffix."""
    suffix = "".join(secrets.choice(ID_ALPHABET) for _ in range(suffix_length))
    return f"TXN{int(time.time() * 1000)}{suffix}"
