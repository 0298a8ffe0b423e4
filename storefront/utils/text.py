# storefront/utils/text.py
import re

_WHITESPACE = re.compile(r"\s+")
_NON_WORD = re.compile(r"[^\w\-]+")
_MULTI_DASH = re.compile(r"\-\-+")

_JS_PROTOCOL = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER = re.compile(r"on\w+=", re.IGNORECASE)

_PHONE = re.compile(r"^\+?\d{10,15}$")


def slugify(text: str) -> str:
    text = str(text).strip().lower()
    text = _WHITESPACE.sub("-", text)
    text = _NON_WORD.sub("", text)
    return _MULTI_DASH.sub("-", text)


def sanitize_input(value: str | None) -> str:
    """Usuwa <, >, javascript: i handlery onX= (ochrona przed XSS w adminie)."""
    if not value:
        return ""
    value = value.replace("<", "").replace(">", "")
    value = _JS_PROTOCOL.sub("", value)
    value = _EVENT_HANDLER.sub("", value)
    return value.strip()


def is_valid_phone(phone: str) -> bool:
    cleaned = re.sub(r"[\s\-]", "", phone or "")
    return bool(_PHONE.match(cleaned))


def check_length(value: str, min_len: int, max_len: int, label: str) -> str:
    """Sanityzuje i sprawdza dlugosc; ValueError trafia do walidatora pydantic."""
    sanitized = sanitize_input(value)
    if not sanitized and min_len > 0:
        raise ValueError(f"{label}: Input is required")
    if len(sanitized) < min_len:
        raise ValueError(f"{label}: Minimum length is {min_len} characters")
    if len(sanitized) > max_len:
        raise ValueError(f"{label}: Maximum length is {max_len} characters")
    return sanitized
