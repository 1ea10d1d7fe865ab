import re
import secrets

_UNSAFE_KEY_CHARS = re.compile(r"[^a-zA-Z0-9\-_]")


def generate_share_token() -> str:
    """Generate an opaque share token: 128 random bits as 32 hex characters."""
    return secrets.token_hex(16)


def sanitize_base_name(name: str) -> str:
    """Replace every character outside [A-Za-z0-9-_] with an underscore."""
    return _UNSAFE_KEY_CHARS.sub("_", name)
