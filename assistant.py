"""Application state and the controller that drives it.

The controller is the single owner of the shopping list and of everything the
page displays. Utterances go through ``commands.interpret`` with an explicit
context, and the resulting command is applied here.
"""
from __future__ import annotations
import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from langdetect import DetectorFactory, detect as lang_detect
from langdetect.lang_detect_exception import LangDetectException

from catalog import PRODUCT_DETAILS
from commands import (
    AddItem,
    ClearList,
    Command,
    CommandContext,
    Navigate,
    ProductQuery,
    RemoveItem,
    Search,
    ShowCart,
    Unrecognized,
    interpret,
)
from shopping_list import ShoppingList, ShoppingListError
from suggestions import Suggestion, generate_suggestions

logger = logging.getLogger(__name__)

DetectorFactory.seed = 0

DEFAULT_LANGUAGE = "en-US"


def detect_lang(text: str) -> str:
    try:
        return lang_detect(text)
    except LangDetectException:
        return "en"


class SessionError(Exception):
    """Raised when the listening-session contract is violated."""


@dataclass
class ListeningSession:
    """One recognition session: interim results, then one final/cancel/error."""

    language: str
    interim_results: List[str] = field(default_factory=list)
    outcome: Optional[str] = None  # final, cancelled or error

    @property
    def active(self) -> bool:
        return self.outcome is None

    def close(self, outcome: str) -> None:
        if not self.active:
            raise SessionError(f"Listening session already {self.outcome}")
        self.outcome = outcome


@dataclass
class AppState:
    items: ShoppingList = field(default_factory=ShoppingList)
    transcript: str = ""
    transcript_lang: Optional[str] = None
    feedback: str = ""
    language: str = DEFAULT_LANGUAGE
    selected_product: Optional[str] = None
    search_query: str = ""
    scroll_target: Optional[str] = None
    suggestions: List[Suggestion] = field(default_factory=list)
    session: Optional[ListeningSession] = None
    is_processing: bool = False

    @property
    def is_listening(self) -> bool:
        return self.session is not None and self.session.active


class ShoppingAssistant:
    def __init__(self, language: str = DEFAULT_LANGUAGE):
        self.state = AppState(language=language)
        self.lock = threading.RLock()
        self._refresh_suggestions()

    # -- utterances -------------------------------------------------------

    def submit_utterance(self, text: str, current_product: Optional[str] = None,
                         lang: Optional[str] = None) -> Optional[Command]:
        """Interpret one finalized utterance and apply it to the list."""
        with self.lock:
            raw = (text or "").strip()
            if not raw:
                self.state.feedback = "Please say or type a command."
                return None
            self.state.transcript = raw
            self.state.transcript_lang = lang or detect_lang(raw)
            context = CommandContext(
                current_product=current_product or self.state.selected_product,
                list_size=len(self.state.items),
            )
            command = interpret(raw, context)
            logger.info("Interpreted %r as %s", raw, command.intent)
            self.state.is_processing = True
            try:
                self.state.feedback = self._apply(command)
            finally:
                self.state.is_processing = False
            self._refresh_suggestions()
            return command

    def _apply(self, command: Command) -> str:
        handler = self._handlers[type(command)]
        try:
            return handler(self, command)
        except ShoppingListError as e:
            logger.warning("%s command failed: %s", command.intent, e)
            return str(e)

    def _apply_add(self, command: AddItem) -> str:
        item = self.state.items.add(command.name, command.quantity)
        return f"Added {item.quantity} {item.name}"

    def _apply_remove(self, command: RemoveItem) -> str:
        item = self.state.items.remove_by_name_query(command.name_query)
        return f"Removed {item.name}"

    def _apply_clear(self, command: ClearList) -> str:
        self.state.items.clear()
        return "Shopping list cleared"

    def _apply_search(self, command: Search) -> str:
        self.state.search_query = command.query
        return f'Showing results for "{command.query}"'

    def _apply_navigate(self, command: Navigate) -> str:
        self.state.scroll_target = command.target
        return f"Scrolled to {command.target}"

    def _apply_show_cart(self, command: ShowCart) -> str:
        return f"Cart has {command.list_size} item(s)."

    def _apply_product_query(self, command: ProductQuery) -> str:
        if command.attribute == "all":
            return f"{command.product_name}: {command.value}"
        return f"{command.product_name}: {command.attribute} — {command.value}"

    def _apply_unrecognized(self, command: Unrecognized) -> str:
        return command.message

    _handlers = {
        AddItem: _apply_add,
        RemoveItem: _apply_remove,
        ClearList: _apply_clear,
        Search: _apply_search,
        Navigate: _apply_navigate,
        ShowCart: _apply_show_cart,
        ProductQuery: _apply_product_query,
        Unrecognized: _apply_unrecognized,
    }

    # -- direct list edits ------------------------------------------------

    def add_item(self, name: str, quantity=1) -> str:
        return self._edit("add", lambda items: items.add(name, quantity),
                          lambda item: f"Added {item.quantity} {item.name}")

    def remove_item(self, item_id: int) -> str:
        return self._edit("remove", lambda items: items.remove_by_id(item_id),
                          lambda item: f"Removed {item.name}")

    def set_quantity(self, item_id: int, quantity) -> str:
        return self._edit("set", lambda items: items.set_quantity(item_id, quantity),
                          lambda item: f"{item.name}: quantity {item.quantity}")

    def increment(self, item_id: int) -> str:
        return self._edit("increment", lambda items: items.increment(item_id),
                          lambda item: f"{item.name}: quantity {item.quantity}")

    def decrement(self, item_id: int) -> str:
        return self._edit("decrement", lambda items: items.decrement(item_id),
                          lambda item: f"{item.name}: quantity {item.quantity}")

    def clear(self) -> str:
        return self._edit("clear", lambda items: items.clear(),
                          lambda count: "Shopping list cleared")

    def _edit(self, action, change, describe) -> str:
        with self.lock:
            try:
                feedback = describe(change(self.state.items))
                logger.info("List %s: %s", action, feedback)
            except ShoppingListError as e:
                logger.warning("List %s failed: %s", action, e)
                feedback = str(e)
            self.state.feedback = feedback
            self._refresh_suggestions()
            return feedback

    # -- view state -------------------------------------------------------

    def view_product(self, name: str) -> str:
        with self.lock:
            name = (name or "").strip()
            if not name:
                self.state.feedback = "Which product do you mean?"
                return self.state.feedback
            self.state.selected_product = name
            self.state.feedback = f"Viewing {name}"
            return self.state.feedback

    def set_language(self, language: str) -> None:
        with self.lock:
            self.state.language = language or DEFAULT_LANGUAGE
            if self.state.session is not None and self.state.session.active:
                self.state.session.language = self.state.language

    def clear_search(self) -> None:
        with self.lock:
            self.state.search_query = ""

    def _refresh_suggestions(self) -> None:
        self.state.suggestions = generate_suggestions(self.state.items.names())

    # -- listening sessions ----------------------------------------------

    def start_listening(self) -> ListeningSession:
        with self.lock:
            if self.state.is_listening:
                raise SessionError("A listening session is already in progress")
            self.state.session = ListeningSession(language=self.state.language)
            self.state.transcript = ""
            self.state.feedback = ""
            logger.info("Listening session started (%s)", self.state.language)
            return self.state.session

    def _active_session(self) -> ListeningSession:
        session = self.state.session
        if session is None or not session.active:
            raise SessionError("No listening session in progress")
        return session

    def interim(self, text: str) -> None:
        with self.lock:
            session = self._active_session()
            session.interim_results.append(text)
            self.state.transcript = (text or "").strip()

    def finalize(self, text: str, current_product: Optional[str] = None) -> Optional[Command]:
        with self.lock:
            session = self._active_session()
            session.close("final")
            logger.info("Listening session finalized")
            return self.submit_utterance(text, current_product, lang=session.language)

    def cancel_listening(self) -> None:
        with self.lock:
            self._active_session().close("cancelled")
            self.state.transcript = ""
            logger.info("Listening session cancelled")

    def listening_error(self, error: str) -> str:
        with self.lock:
            self._active_session().close("error")
            self.state.feedback = f"Voice error: {error or 'unknown'}"
            logger.warning("Listening session failed: %s", error)
            return self.state.feedback

    # -- rendering --------------------------------------------------------

    def snapshot(self, search_term: Optional[str] = None) -> Dict:
        with self.lock:
            state = self.state
            term = search_term if search_term is not None else state.search_query
            grouped = state.items.grouped(term)
            return {
                "list": {cat: [i.to_dict() for i in items] for cat, items in grouped.items()},
                "items": [i.to_dict() for i in state.items],
                "count": len(state.items),
                "suggestions": [s.to_dict() for s in state.suggestions],
                "transcript": state.transcript,
                "transcript_lang": state.transcript_lang,
                "feedback": state.feedback,
                "language": state.language,
                "selected_product": state.selected_product,
                "search_query": state.search_query,
                "scroll_target": state.scroll_target,
                "is_listening": state.is_listening,
                "is_processing": state.is_processing,
                "products": list(PRODUCT_DETAILS),
            }
