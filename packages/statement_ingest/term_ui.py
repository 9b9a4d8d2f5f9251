"""Tiny terminal UI helpers (prompt_toolkit-based).

Kept separate from the review flow so the prompts can be tested in isolation
with a pipe input and a dummy output.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.validation import Validator

from .models import CategoryResult


def _best_prefix_match(words: Sequence[str], text: str) -> str | None:
    if not text:
        return None
    lower = text.lower()
    for w in words:
        if w.lower() == lower:
            return None
    for w in words:
        if w.lower().startswith(lower):
            return w
    return None


def select_category(
    categories: Sequence[str] | Iterable[str],
    *,
    default: str,
    message: str = "Category (Enter to accept): ",
    session: PromptSession | None = None,
) -> str:
    """Prompt for one of ``categories`` with ``default`` pre-filled.

    Matching is case-insensitive; the canonical spelling is returned. Tab
    completes the first category starting with the typed prefix, and Enter
    does the same before submitting. Input outside ``categories`` is rejected
    by the validator and the prompt stays open.
    """

    words = list(categories)
    by_lower = {w.lower(): w for w in words}

    completer = WordCompleter(words, ignore_case=True, match_middle=True, sentence=True)
    validator = Validator.from_callable(
        lambda text: text.strip().lower() in by_lower,
        error_message="Choose one of the listed categories",
        move_cursor_to_end=True,
    )

    kb = KeyBindings()

    @kb.add("tab", eager=True)
    def _(event) -> None:  # pragma: no cover - integration path
        b = event.app.current_buffer
        cand = _best_prefix_match(words, b.document.text)
        if cand:
            b.insert_text(cand[len(b.document.text) :])
        elif b.complete_state is None:
            b.start_completion(select_first=True)
        else:
            b.complete_next()

    @kb.add("enter", eager=True)
    def _(event) -> None:  # pragma: no cover
        b = event.app.current_buffer
        cs = b.complete_state
        if cs is not None and cs.current_completion is not None:
            b.apply_completion(cs.current_completion)
        else:
            cand = _best_prefix_match(words, b.document.text)
            if cand:
                b.insert_text(cand[len(b.document.text) :])
        b.validate_and_handle()

    if session is None:
        sess: PromptSession = PromptSession(key_bindings=kb)
    else:
        sess = PromptSession(
            input=getattr(session, "input", None),
            output=getattr(session, "output", None),
            key_bindings=kb,
        )

    answer = sess.prompt(
        message,
        default=default,
        completer=completer,
        complete_while_typing=True,
        validator=validator,
        validate_while_typing=False,
    )
    return by_lower[answer.strip().lower()]


def format_suggestions(suggestions: Sequence[CategoryResult]) -> str:
    """One line per suggestion: ``Category / Subcategory (confidence)``."""

    if not suggestions:
        return "  (no keyword matches)"
    lines = []
    for s in suggestions:
        label = f"{s.category} / {s.subcategory}" if s.subcategory else s.category
        lines.append(f"  - {label} ({s.confidence:.2f})")
    return "\n".join(lines)


__all__ = ["select_category", "format_suggestions"]
