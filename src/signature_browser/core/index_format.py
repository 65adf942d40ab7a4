"""Index labels as the backend auto-assigns them."""

from signature_browser.api.models import IndexType, SignatureComponent

_ROMAN_NUMERALS = (
    (1000, "M"), (900, "CM"), (500, "D"), (400, "CD"),
    (100, "C"), (90, "XC"), (50, "L"), (40, "XL"),
    (10, "X"), (9, "IX"), (5, "V"), (4, "IV"), (1, "I"),
)


def to_roman(num: int) -> str:
    """Roman numeral for 1..3999; other values are returned as decimal."""
    if num <= 0 or num >= 4000:
        return str(num)
    result = []
    for value, numeral in _ROMAN_NUMERALS:
        while num >= value:
            result.append(numeral)
            num -= value
    return "".join(result)


def to_char_index(num: int, capital: bool = False) -> str:
    """Bijective base-26 letters: 1 -> a, 26 -> z, 27 -> aa."""
    if num <= 0:
        return str(num)
    base = ord("A") if capital else ord("a")
    result = ""
    while num > 0:
        num, remainder = divmod(num - 1, 26)
        result = chr(base + remainder) + result
    return result


def format_index(count: int, index_type: IndexType) -> str:
    if count <= 0:
        return ""
    if index_type is IndexType.ROMAN:
        return to_roman(count)
    if index_type is IndexType.SMALL_CHAR:
        return to_char_index(count, capital=False)
    if index_type is IndexType.CAPITAL_CHAR:
        return to_char_index(count, capital=True)
    return str(count)


def next_index_preview(component: SignatureComponent) -> str:
    """Label the backend will give the next element created without an explicit index."""
    return format_index(component.index_count + 1, component.index_type)
