"""Ordered predicate dispatch.

A ``Dispatcher`` holds one value and an ordered list of ``CaseEntry``
objects. ``evaluate()`` runs the action of the first entry whose predicate
holds for the value, or the optional fallback when none does.

Predicates and actions are plain closures. Exceptions raised inside them are
never caught here: the first one aborts the scan and reaches the caller with
its original type.

Dispatchers are not thread-safe. Evaluating the same instance from several
threads while closures share mutable state needs external locking.
"""

from collections.abc import Callable, Iterable
from typing import Generic, TypeVar

T = TypeVar("T")

PredicateFn = Callable[[T], object]
ActionFn = Callable[[], object]


class CaseEntry(Generic[T]):
    """A predicate over the dispatch value paired with its action."""

    def __init__(self, predicate: PredicateFn, action: ActionFn) -> None:
        self.predicate = predicate
        self.action = action

    def evaluate(self, value: T) -> bool:
        """Run the action if the predicate holds; report whether it did."""
        if self.predicate(value):
            self.action()
            return True
        return False

    def __repr__(self) -> str:
        return f"CaseEntry(predicate={self.predicate!r}, action={self.action!r})"


class Dispatcher(Generic[T]):
    """First-match-wins dispatch over ``value``.

    Cases are considered strictly in registration order. Once a predicate
    holds, its action runs and no later predicate is called. The fallback
    runs only when every predicate was false; with no fallback an unmatched
    evaluation is a silent no-op.
    """

    def __init__(self, value: T) -> None:
        self._value = value
        self._cases: list[CaseEntry[T]] = []
        self._fallback: ActionFn | None = None

    @property
    def value(self) -> T:
        return self._value

    @property
    def cases(self) -> tuple[CaseEntry[T], ...]:
        return tuple(self._cases)

    @property
    def fallback(self) -> ActionFn | None:
        return self._fallback

    def __len__(self) -> int:
        return len(self._cases)

    def add_case(
        self, predicate: PredicateFn, action: ActionFn
    ) -> "Dispatcher[T]":
        self._cases.append(CaseEntry(predicate, action))
        return self

    def set_fallback(self, action: ActionFn) -> "Dispatcher[T]":
        # Last registration wins.
        self._fallback = action
        return self

    def evaluate(self) -> bool:
        """Dispatch the value.

        Returns True when a registered case matched, False when the fallback
        ran or nothing ran at all.
        """
        for case in self._cases:
            if case.evaluate(self._value):
                return True
        if self._fallback is not None:
            self._fallback()
        return False

    def __repr__(self) -> str:
        return (
            f"Dispatcher(value={self._value!r}, cases={len(self._cases)}, "
            f"fallback={'set' if self._fallback is not None else 'unset'})"
        )


def match_first(
    value: T,
    cases: Iterable[tuple[PredicateFn, ActionFn]],
    default: ActionFn | None = None,
) -> bool:
    """Build a ``Dispatcher`` from ``(predicate, action)`` pairs and run it.

    Pairs are registered in iteration order and ``default`` becomes the
    fallback when given. Returns the result of ``Dispatcher.evaluate``.
    """
    dispatcher: Dispatcher[T] = Dispatcher(value)
    for predicate, action in cases:
        dispatcher.add_case(predicate, action)
    if default is not None:
        dispatcher.set_fallback(default)
    return dispatcher.evaluate()
