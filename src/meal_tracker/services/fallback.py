"""Offline keyword-based nutrition estimates."""

import logging
import math
import re
from dataclasses import dataclass

from meal_tracker.domain.nutrition import FoodItem, NutritionResult
from meal_tracker.services.normalizer import normalize

_logger = logging.getLogger(__name__)

_UNIT_WORDS = r"(?:cups?|pieces?|slices?|g|grams?)"

# Counts above this are treated as unparsable.
MAX_QUANTITY = 10_000


@dataclass(frozen=True)
class KeywordGroup:
    """Surface forms sharing one per-serving nutrition profile."""

    patterns: tuple[str, ...]
    calories: float
    protein: float
    carbs: float
    fats: float


KEYWORD_GROUPS: tuple[KeywordGroup, ...] = (
    KeywordGroup(("egg", "eggs"), 70, 6, 0.5, 5),
    KeywordGroup(("rice", "white rice", "brown rice"), 205, 4.3, 45, 0.4),
    KeywordGroup(("chicken", "chicken breast"), 165, 31, 0, 3.6),
    KeywordGroup(("bread", "toast", "slice"), 80, 2.3, 15, 1),
    KeywordGroup(("banana",), 105, 1.3, 27, 0.4),
    KeywordGroup(("apple",), 95, 0.5, 25, 0.3),
    KeywordGroup(("milk",), 150, 8, 12, 8),
    KeywordGroup(("pasta",), 220, 8, 44, 1.1),
    KeywordGroup(("cheese",), 113, 7, 1, 9),
    KeywordGroup(("beef", "steak"), 250, 26, 0, 15),
    KeywordGroup(("salmon", "fish"), 208, 22, 0, 12),
    KeywordGroup(("oatmeal", "oats"), 150, 5, 27, 3),
    KeywordGroup(("yogurt", "greek yogurt"), 100, 17, 6, 0),
    KeywordGroup(("avocado",), 234, 3, 12, 21),
    KeywordGroup(("almonds", "nuts"), 164, 6, 6, 14),
    KeywordGroup(("potato", "potatoes"), 161, 4, 37, 0.2),
    KeywordGroup(("broccoli",), 34, 3, 7, 0.4),
    KeywordGroup(("spinach",), 23, 3, 4, 0.4),
    KeywordGroup(("quinoa",), 222, 8, 39, 4),
    KeywordGroup(("turkey",), 189, 29, 0, 7),
)

PLACEHOLDER_NAME = "Unspecified meal"
PLACEHOLDER_PROFILE = KeywordGroup((), 200, 10, 20, 5)


def analyze_offline(description: str) -> NutritionResult:
    """Estimate nutrition for a description from the keyword table.

    Every group contributes at most one item, scaled by the number written
    directly before the matched food word. Text with no known keyword yields
    a single placeholder item.
    """
    text = description or ""
    items: list[FoodItem] = []
    for group in KEYWORD_GROUPS:
        item = _match_group(group, text)
        if item is not None:
            items.append(item)

    if not items:
        items.append(_placeholder(text))
        _logger.debug("No keywords matched, using placeholder estimate")
    return normalize(items)


def _match_group(group: KeywordGroup, text: str) -> FoodItem | None:
    matched = _find_pattern(group, text)
    if matched is None:
        return None
    pattern, word = matched
    quantity = _extract_quantity(word, text)
    return FoodItem(
        name=_item_name(pattern, quantity),
        quantity=quantity,
        unit="serving",
        calories=round(group.calories * quantity),
        protein=round(group.protein * quantity, 1),
        carbs=round(group.carbs * quantity, 1),
        fats=round(group.fats * quantity, 1),
    )


def _find_pattern(group: KeywordGroup, text: str) -> tuple[str, str] | None:
    """Return the first matching pattern and the regex that matched it.

    Exact surface forms are tried before plural forms so that a listed
    plural such as ``potatoes`` wins over ``potato`` + ``es``.
    """
    for plural in (False, True):
        for pattern in group.patterns:
            word = re.escape(pattern)
            if plural:
                word = rf"{word}(?:e?s)?"
            if re.search(rf"\b{word}\b", text, re.IGNORECASE):
                return pattern, word
    return None


def _extract_quantity(word: str, text: str) -> float:
    match = re.search(
        rf"(\d+(?:\.\d+)?)\s*{_UNIT_WORDS}?\s*{word}\b", text, re.IGNORECASE
    )
    if match is None:
        return 1
    try:
        quantity = float(match.group(1))
    except ValueError:
        return 1
    if not math.isfinite(quantity) or not 0 < quantity <= MAX_QUANTITY:
        return 1
    return int(quantity) if quantity.is_integer() else quantity


def _item_name(pattern: str, quantity: float) -> str:
    if quantity <= 1:
        return pattern
    suffix = "" if pattern.endswith("s") else "s"
    return f"{quantity} {pattern}{suffix}"


def _placeholder(text: str) -> FoodItem:
    return FoodItem(
        name=text.strip() or PLACEHOLDER_NAME,
        quantity=1,
        unit="serving",
        calories=PLACEHOLDER_PROFILE.calories,
        protein=PLACEHOLDER_PROFILE.protein,
        carbs=PLACEHOLDER_PROFILE.carbs,
        fats=PLACEHOLDER_PROFILE.fats,
    )
