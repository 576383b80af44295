from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from catalog import (
    COMMONLY_NEEDED,
    CO_OCCURRENCE,
    SEASONAL_ITEMS,
    SEASONAL_LIMIT,
    SUBSTITUTES,
)

SEASONAL = "seasonal"
RECOMMENDATION = "recommendation"


@dataclass(frozen=True)
class Suggestion:
    kind: str
    items: List[str] = field(default_factory=list)
    message: str = ""

    def to_dict(self) -> Dict:
        return {"kind": self.kind, "items": list(self.items), "message": self.message}


def generate_suggestions(names: Iterable[str]) -> List[Suggestion]:
    """Advisory picks for a list whose (lower-cased) item names are ``names``.

    Seasonal picks come first, then co-occurrence rules in declaration order,
    then the generic "commonly needed" row for any non-empty list.
    """
    names = [n.lower() for n in names]
    out: List[Suggestion] = []
    if SEASONAL_ITEMS:
        out.append(Suggestion(SEASONAL, SEASONAL_ITEMS[:SEASONAL_LIMIT], "In season now"))
    for present, absent, items, message in CO_OCCURRENCE:
        if present in names and absent not in names:
            out.append(Suggestion(RECOMMENDATION, list(items), message))
    if names:
        out.append(Suggestion(RECOMMENDATION, list(COMMONLY_NEEDED), "Commonly needed items"))
    return out


def substitutes_for(item: str) -> List[str]:
    item = item.strip().lower()
    if item in SUBSTITUTES:
        return list(SUBSTITUTES[item])
    if item.endswith("s") and item[:-1] in SUBSTITUTES:
        return list(SUBSTITUTES[item[:-1]])
    return []
