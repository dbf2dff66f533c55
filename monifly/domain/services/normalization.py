"""Domain normalization helpers."""

from collections.abc import Iterable

from monifly.domain.models import TransactionCategory


_KNOWN_CATEGORY_KEYS = {category.value: category.value for category in TransactionCategory}


def normalize_currency_code(code: str | None) -> str | None:
    """Normalize currency codes.

    Args:
        code: Raw currency code from a caller or document.

    Returns:
        str | None: Upper-case code, or None when empty.
    """
    if not code:
        return None
    cleaned = code.strip()
    return cleaned.upper() if cleaned else None


def normalize_category(
    raw: str | None,
    custom_categories: Iterable[str] = (),
) -> str:
    """Resolve a category label to its canonical key.

    Built-in categories match case-insensitively and return the enum value.
    Registered custom categories keep their stored spelling. Anything else is
    returned trimmed, as a new custom category. Empty input falls back to
    ``other``.

    Args:
        raw: Category entered by the user.
        custom_categories: Custom categories already registered.

    Returns:
        str: Canonical category key.
    """
    cleaned = (raw or "").strip()
    if not cleaned:
        return TransactionCategory.OTHER.value
    folded = cleaned.casefold()
    if folded in _KNOWN_CATEGORY_KEYS:
        return _KNOWN_CATEGORY_KEYS[folded]
    for custom in custom_categories:
        if custom.casefold() == folded:
            return custom
    return cleaned


def is_builtin_category(category: str) -> bool:
    """Return True when the key is one of the built-in categories."""
    return category in _KNOWN_CATEGORY_KEYS


def categories_match(left: str, right: str) -> bool:
    """Compare two category keys case-insensitively."""
    return left.strip().casefold() == right.strip().casefold()


__all__ = [
    "normalize_currency_code",
    "normalize_category",
    "is_builtin_category",
    "categories_match",
]
