from typing import Iterable, List


def normalize_category(value) -> str:
    return value.strip().lower() if isinstance(value, str) else ""


def build_variants(raw) -> List[str]:
    """'phone' -> ['phone', 'phones']; 'tablets' -> ['tablets', 'tablet']."""
    lower = normalize_category(raw)
    if not lower:
        return []

    if lower.endswith("s"):
        singular, plural = lower[:-1], lower
    else:
        singular, plural = lower, f"{lower}s"

    variants = []
    for v in (lower, singular, plural):
        if v and v not in variants:
            variants.append(v)
    return variants


def expand_category_values(values: Iterable) -> List[str]:
    result = []
    for value in values or []:
        for variant in build_variants(value):
            if variant not in result:
                result.append(variant)
    return result
