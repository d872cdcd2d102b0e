#!/usr/bin/env python
"""Demo: first-match dispatch with the builder API.

Walks through three dispatches:
  1. An int value checked against overlapping ranges, with a fallback
  2. A str value checked with closures that capture the enclosing scope
  3. An int value with no fallback, where an unmatched dispatch does nothing

Run with: uv run python scripts/demo_switch.py
"""

from caseswitch.core.dispatch import Dispatcher, match_first


def main() -> None:
    print("=" * 70)
    print("Demo: first-match dispatch")
    print("=" * 70)

    value = 50
    print(f"\nTesting int value = {value}")
    (
        Dispatcher(value)
        .add_case(
            lambda v: 0 <= v <= 100,
            lambda: print("Value is in range [0, 100]"),
        )
        .add_case(lambda v: v > 100, lambda: print("Value is greater than 100"))
        .add_case(lambda v: v < 0, lambda: print("Value is less than 0"))
        .set_fallback(lambda: print("Unexpected value (default)"))
        .evaluate()
    )

    text = "Hello Gerard!"
    name = "Gerard"
    print(f'\nTesting string value = "{text}"')
    match_first(
        text,
        [
            (lambda s: name in s, lambda: print(f"Hi {name}!")),
            (lambda s: len(s) > 10, lambda: print("Long string")),
        ],
        default=lambda: print(f"Other string: {text}"),
    )

    another = 10
    print(f"\nTesting int value = {another} without a fallback")
    matched = match_first(
        another,
        [
            (lambda v: v == 10, lambda: print("Value is 10")),
            (lambda v: v > 10, lambda: print("Value is greater than 10")),
        ],
    )
    print(f"matched: {matched}")

    missing = 3
    print(f"\nTesting int value = {missing} without a fallback")
    matched = match_first(
        missing,
        [(lambda v: v == 10, lambda: print("Value is 10"))],
    )
    print(f"matched: {matched} (nothing ran)")


if __name__ == "__main__":
    main()
