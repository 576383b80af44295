"""Rule-based interpreter for spoken or typed shopping-list commands.

An utterance is lower-cased and checked against an ordered list of rules.
The first rule whose pattern matches builds the result; later rules are
never consulted. Several patterns overlap ("go to cart" is also a navigate
command, "show my cart" is also a search), so the order in ``RULES`` is part
of the behaviour.
"""
from __future__ import annotations
import re
from dataclasses import asdict, dataclass
from typing import Callable, ClassVar, Dict, List, NamedTuple, Optional, Union

from catalog import (
    CATEGORIES,
    FILLER_WORDS,
    NUMBER_WORDS,
    OTHER_CATEGORY,
    PRODUCT_DETAILS,
)


def _words(words) -> str:
    return "|".join(re.escape(w) for w in words)


FILLER_PAT = re.compile(r"\b(%s)\b" % _words(FILLER_WORDS), re.I)
NUMBER_WORD_PAT = re.compile(r"\b(%s)\b" % _words(NUMBER_WORDS), re.I)
DIGIT_QTY_PAT = re.compile(r"(\d+)\s+([a-zA-Z]+)")
LEADING_DIGITS_PAT = re.compile(r"^\d+\s+")
SPACES_PAT = re.compile(r"\s+")

ADD_PAT = re.compile(r"\b(add|buy|i need|i want|need|want)\b")
ADD_STRIP_PAT = re.compile(r"\b(add|buy|i need|i want|need|want|to my list|to the list)\b", re.I)
REMOVE_PAT = re.compile(r"\b(remove|delete|take off|cancel)\b")
REMOVE_STRIP_PAT = re.compile(r"\b(remove|delete|remove from my list|from my list|from the list)\b", re.I)
CLEAR_VERB_PAT = re.compile(r"\b(clear|empty)\b")
CLEAR_TARGET_PAT = re.compile(r"\b(list|cart)\b")
SEARCH_PAT = re.compile(r"\b(find|search|show me|show)\b", re.I)
NAVIGATE_PAT = re.compile(r"\b(scroll to|go to|navigate to)\b", re.I)
SHOW_CART_PAT = re.compile(r"\b(show.*cart|open.*cart|go to cart|my cart)\b")
PRODUCT_PAT = re.compile(r"\b(battery|memory|processor|ram|camera|price)\b")

NO_MATCH_HINT = 'Try "Add milk" or "Show me phones".'


@dataclass(frozen=True)
class CommandContext:
    current_product: Optional[str] = None
    list_size: int = 0


@dataclass(frozen=True)
class AddItem:
    name: str
    quantity: int = 1
    intent: ClassVar[str] = "add"


@dataclass(frozen=True)
class RemoveItem:
    name_query: str
    intent: ClassVar[str] = "remove"


@dataclass(frozen=True)
class ClearList:
    intent: ClassVar[str] = "clear"


@dataclass(frozen=True)
class Search:
    query: str
    intent: ClassVar[str] = "search"


@dataclass(frozen=True)
class Navigate:
    target: str
    intent: ClassVar[str] = "navigate"


@dataclass(frozen=True)
class ShowCart:
    list_size: int
    intent: ClassVar[str] = "show_cart"


@dataclass(frozen=True)
class ProductQuery:
    product_name: str
    attribute: str  # battery, memory, processor or all
    value: str
    intent: ClassVar[str] = "product_query"


@dataclass(frozen=True)
class Unrecognized:
    raw_text: str
    reason: str
    message: str
    intent: ClassVar[str] = "unknown"


Command = Union[AddItem, RemoveItem, ClearList, Search, Navigate, ShowCart, ProductQuery, Unrecognized]

MISSING_ITEM = "missing_item"
MISSING_REMOVE_TARGET = "missing_remove_target"
MISSING_SEARCH_QUERY = "missing_search_query"
MISSING_NAV_TARGET = "missing_nav_target"
NO_PRODUCT = "no_product"
NO_PRODUCT_DETAILS = "no_product_details"
NO_MATCH = "no_match"


def command_to_dict(command: Command) -> Dict:
    out = {"intent": command.intent}
    out.update(asdict(command))
    return out


def categorize(name: str) -> str:
    lower = name.lower()
    for category, keywords in CATEGORIES.items():
        if any(k in lower for k in keywords):
            return category
    return OTHER_CATEGORY


def extract_quantity(fragment: str) -> int:
    """Quantity named in ``fragment``: a leading-style numeral, a number word, or 1."""
    m = DIGIT_QTY_PAT.search(fragment)
    if m:
        return max(1, int(m.group(1)))
    w = NUMBER_WORD_PAT.search(fragment)
    if w:
        return NUMBER_WORDS[w.group(1).lower()]
    return 1


def sanitize(text: str) -> str:
    """Drop filler words (please, hey, ok, ...) and surrounding whitespace."""
    return SPACES_PAT.sub(" ", FILLER_PAT.sub("", text)).strip()


def _handle_add(cmd: str, raw: str, context: CommandContext) -> Command:
    stripped = sanitize(ADD_STRIP_PAT.sub("", cmd))
    quantity = extract_quantity(stripped)
    name = NUMBER_WORD_PAT.sub("", LEADING_DIGITS_PAT.sub("", stripped))
    name = SPACES_PAT.sub(" ", name).strip()
    if not name:
        return Unrecognized(raw, MISSING_ITEM, 'Tell me what to add, e.g., "Add 2 bananas"')
    return AddItem(name=name, quantity=quantity)


def _handle_remove(cmd: str, raw: str, context: CommandContext) -> Command:
    stripped = sanitize(REMOVE_STRIP_PAT.sub("", cmd))
    if not stripped:
        return Unrecognized(raw, MISSING_REMOVE_TARGET, "Which item should I remove?")
    return RemoveItem(name_query=stripped)


def _handle_clear(cmd: str, raw: str, context: CommandContext) -> Command:
    return ClearList()


def _handle_search(cmd: str, raw: str, context: CommandContext) -> Command:
    stripped = sanitize(SEARCH_PAT.sub("", cmd))
    if not stripped:
        return Unrecognized(raw, MISSING_SEARCH_QUERY, "What would you like me to show?")
    return Search(query=stripped)


def _handle_navigate(cmd: str, raw: str, context: CommandContext) -> Command:
    stripped = sanitize(NAVIGATE_PAT.sub("", cmd))
    if not stripped:
        return Unrecognized(raw, MISSING_NAV_TARGET, "Which section should I scroll to?")
    return Navigate(target=stripped)


def _handle_show_cart(cmd: str, raw: str, context: CommandContext) -> Command:
    return ShowCart(list_size=context.list_size)


def resolve_product(cmd: str, current_product: Optional[str]) -> Optional[str]:
    # First catalog key wins when several products are mentioned.
    for name in PRODUCT_DETAILS:
        if name in cmd:
            return name
    if current_product and current_product.strip():
        return current_product.strip().lower()
    return None


def _handle_product(cmd: str, raw: str, context: CommandContext) -> Command:
    product = resolve_product(cmd, context.current_product)
    if product is None:
        return Unrecognized(raw, NO_PRODUCT, "Which product do you mean?")
    details = PRODUCT_DETAILS.get(product)
    if not details:
        return Unrecognized(raw, NO_PRODUCT_DETAILS, f"No details for {product}")
    if "battery" in cmd:
        attribute = "battery"
    elif "memory" in cmd or "ram" in cmd:
        attribute = "memory"
    elif "processor" in cmd:
        attribute = "processor"
    else:
        value = ", ".join(f"{k}: {v}" for k, v in details.items())
        return ProductQuery(product_name=product, attribute="all", value=value)
    return ProductQuery(product_name=product, attribute=attribute, value=details[attribute])


class Rule(NamedTuple):
    name: str
    matches: Callable[[str], bool]
    handle: Callable[[str, str, CommandContext], Command]


RULES: List[Rule] = [
    Rule("add", lambda cmd: bool(ADD_PAT.search(cmd)), _handle_add),
    Rule("remove", lambda cmd: bool(REMOVE_PAT.search(cmd)), _handle_remove),
    Rule("clear", lambda cmd: bool(CLEAR_VERB_PAT.search(cmd) and CLEAR_TARGET_PAT.search(cmd)), _handle_clear),
    Rule("search", lambda cmd: bool(SEARCH_PAT.search(cmd)), _handle_search),
    Rule("navigate", lambda cmd: bool(NAVIGATE_PAT.search(cmd)), _handle_navigate),
    Rule("show_cart", lambda cmd: bool(SHOW_CART_PAT.search(cmd)), _handle_show_cart),
    Rule("product_query", lambda cmd: bool(PRODUCT_PAT.search(cmd)), _handle_product),
]


def match_rule(cmd: str) -> Optional[Rule]:
    for rule in RULES:
        if rule.matches(cmd):
            return rule
    return None


def interpret(utterance: str, context: Optional[CommandContext] = None) -> Command:
    context = context or CommandContext()
    cmd = utterance.strip().lower()
    rule = match_rule(cmd)
    if rule is None:
        return Unrecognized(
            utterance, NO_MATCH, f'Sorry, I didn\'t understand: "{utterance}". {NO_MATCH_HINT}'
        )
    return rule.handle(cmd, utterance, context)
