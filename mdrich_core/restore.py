"""
Placeholder Restoration

Currency tokens come back first, with every "$" escaped so the downstream
math parser never pairs a restored amount. Masked code and math come back
last, byte for byte, so their content is never re-scanned.
"""

from .masking import PlaceholderMap, unmask


def escape_dollars(text: str) -> str:
    """Prefix every unescaped "$" with a backslash."""
    out = []
    prev = ""
    for ch in text:
        if ch == "$" and prev != "\\":
            out.append("\\$")
        else:
            out.append(ch)
        prev = ch
    return "".join(out)


def restore_currency(text: str, currency: PlaceholderMap) -> str:
    """Substitute currency tokens with their escaped original text."""
    for token, original in currency.items():
        text = text.replace(token, escape_dollars(original))
    return text


def restore(text: str, currency: PlaceholderMap, masks: PlaceholderMap) -> str:
    """
    Undo both placeholder maps in the required order.

    Args:
        text: Rewritten text still holding tokens
        currency: Currency map from the currency pass
        masks: Mask map from the masking passes

    Returns:
        Text with every token replaced
    """
    text = restore_currency(text, currency)
    return unmask(text, masks)
