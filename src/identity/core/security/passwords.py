"""Password strength validation."""

from zxcvbn import zxcvbn

from src.identity.core.config import get_settings


def check_password_strength(password: str) -> str:
    """Validate password strength using zxcvbn entropy estimation.

    Used from pydantic field validators, so it raises ValueError.
    """
    result = zxcvbn(password)
    if result["score"] >= get_settings().min_password_score:
        return password

    feedback = result.get("feedback", {})
    warning = feedback.get("warning", "")
    suggestions = feedback.get("suggestions", [])
    if warning:
        raise ValueError(f"Weak password: {warning}")
    elif suggestions:
        raise ValueError(f"Weak password: {suggestions[0]}")
    else:
        raise ValueError("Password is too weak. Use a longer password with a mix of characters.")
