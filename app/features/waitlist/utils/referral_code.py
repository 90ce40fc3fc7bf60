import secrets
import string

REFERRAL_CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_referral_code(length: int = 8) -> str:
    return "".join(secrets.choice(REFERRAL_CODE_ALPHABET) for _ in range(length))


def normalize_referral_code(code: str | None) -> str | None:
    """Trim and upper-case a client-supplied code; blank means no code."""
    if code is None:
        return None
    code = code.strip().upper()
    return code or None
