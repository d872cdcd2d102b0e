import threading

import pytest

from caseswitch.core.dispatch import CaseEntry, Dispatcher, match_first


class _Recorder:
    def __init__(self) -> None:
        self.calls: list[str] = []

    def action(self, name: str):
        def run() -> None:
            self.calls.append(name)

        return run


def _range_dispatcher(value: int, rec: _Recorder) -> Dispatcher[int]:
    return (
        Dispatcher(value)
        .add_case(lambda v: 0 <= v <= 100, rec.action("A1"))
        .add_case(lambda v: v > 100, rec.action("A2"))
        .add_case(lambda v: v < 0, rec.action("A3"))
        .set_fallback(rec.action("A4"))
    )


class TestCaseEntry:
    def test_runs_action_when_predicate_holds(self) -> None:
        rec = _Recorder()
        entry = CaseEntry(lambda v: v == 1, rec.action("hit"))
        assert entry.evaluate(1) is True
        assert rec.calls == ["hit"]

    def test_skips_action_when_predicate_fails(self) -> None:
        rec = _Recorder()
        entry = CaseEntry(lambda v: v == 1, rec.action("hit"))
        assert entry.evaluate(2) is False
        assert rec.calls == []

    def test_truthy_predicate_result_counts_as_match(self) -> None:
        rec = _Recorder()
        entry = CaseEntry(lambda s: s.find("x") + 1, rec.action("hit"))
        assert entry.evaluate("abx") is True
        assert rec.calls == ["hit"]

    def test_predicate_error_propagates(self) -> None:
        rec = _Recorder()

        def boom(_: int) -> bool:
            raise KeyError("missing")

        entry = CaseEntry(boom, rec.action("hit"))
        with pytest.raises(KeyError, match="missing"):
            entry.evaluate(1)
        assert rec.calls == []

    def test_action_error_propagates(self) -> None:
        def fail() -> None:
            raise RuntimeError("action failed")

        entry = CaseEntry(lambda v: True, fail)
        with pytest.raises(RuntimeError, match="action failed"):
            entry.evaluate(1)


class TestScenario:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (50, ["A1"]),
            (150, ["A2"]),
            (-10, ["A3"]),
            (0, ["A1"]),
            (100, ["A1"]),
            (101, ["A2"]),
        ],
    )
    def test_range_cases(self, value: int, expected: list[str]) -> None:
        rec = _Recorder()
        assert _range_dispatcher(value, rec).evaluate() is True
        assert rec.calls == expected

    def test_reordered_cases_keep_first_matching(self) -> None:
        rec = _Recorder()
        dispatcher = (
            Dispatcher(50)
            .add_case(lambda v: v > 100, rec.action("A2"))
            .add_case(lambda v: 0 <= v <= 100, rec.action("A1"))
        )
        dispatcher.evaluate()
        assert rec.calls == ["A1"]


class TestFirstMatch:
    def test_earliest_overlapping_case_wins(self) -> None:
        rec = _Recorder()
        (
            Dispatcher(5)
            .add_case(lambda v: v > 0, rec.action("positive"))
            .add_case(lambda v: v > 3, rec.action("big"))
            .add_case(lambda v: v == 5, rec.action("five"))
            .evaluate()
        )
        assert rec.calls == ["positive"]

    def test_later_predicates_never_called(self) -> None:
        checked: list[int] = []
        rec = _Recorder()

        def counting(index: int, result: bool):
            def predicate(_: int) -> bool:
                checked.append(index)
                return result

            return predicate

        dispatcher = Dispatcher(7)
        dispatcher.add_case(counting(0, False), rec.action("a"))
        dispatcher.add_case(counting(1, True), rec.action("b"))
        dispatcher.add_case(counting(2, True), rec.action("c"))
        dispatcher.add_case(counting(3, True), rec.action("d"))
        dispatcher.evaluate()

        assert checked == [0, 1]
        assert rec.calls == ["b"]

    def test_each_predicate_checked_once_when_nothing_matches(self) -> None:
        counter = {"n": 0}

        def never(_: int) -> bool:
            counter["n"] += 1
            return False

        dispatcher = Dispatcher(1)
        for _ in range(4):
            dispatcher.add_case(never, lambda: None)
        assert dispatcher.evaluate() is False
        assert counter["n"] == 4


class TestFallback:
    def test_fallback_runs_when_nothing_matches(self) -> None:
        rec = _Recorder()
        dispatcher = (
            Dispatcher(0)
            .add_case(lambda v: v > 0, rec.action("positive"))
            .set_fallback(rec.action("fallback"))
        )
        assert dispatcher.evaluate() is False
        assert rec.calls == ["fallback"]

    def test_fallback_skipped_when_a_case_matches(self) -> None:
        rec = _Recorder()
        dispatcher = (
            Dispatcher(1)
            .add_case(lambda v: v > 0, rec.action("positive"))
            .set_fallback(rec.action("fallback"))
        )
        assert dispatcher.evaluate() is True
        assert rec.calls == ["positive"]

    def test_last_fallback_registration_wins(self) -> None:
        rec = _Recorder()
        dispatcher = Dispatcher("x")
        dispatcher.set_fallback(rec.action("first"))
        dispatcher.set_fallback(rec.action("second"))
        dispatcher.evaluate()
        assert rec.calls == ["second"]

    def test_zero_cases_runs_fallback(self) -> None:
        rec = _Recorder()
        dispatcher = Dispatcher(None).set_fallback(rec.action("fallback"))
        assert len(dispatcher) == 0
        dispatcher.evaluate()
        assert rec.calls == ["fallback"]

    def test_no_match_no_fallback_is_silent(self) -> None:
        rec = _Recorder()
        dispatcher = (
            Dispatcher(3)
            .add_case(lambda v: v == 10, rec.action("ten"))
            .add_case(lambda v: v > 10, rec.action("big"))
        )
        assert dispatcher.fallback is None
        assert dispatcher.evaluate() is False
        assert rec.calls == []

    def test_empty_dispatcher_is_silent(self) -> None:
        assert Dispatcher(1).evaluate() is False


class TestErrorPropagation:
    def test_predicate_error_stops_scan(self) -> None:
        rec = _Recorder()
        later_checked: list[bool] = []

        def boom(_: int) -> bool:
            raise ValueError("bad predicate")

        def later(_: int) -> bool:
            later_checked.append(True)
            return True

        dispatcher = (
            Dispatcher(1)
            .add_case(lambda v: False, rec.action("first"))
            .add_case(boom, rec.action("boom"))
            .add_case(later, rec.action("later"))
            .set_fallback(rec.action("fallback"))
        )
        with pytest.raises(ValueError, match="bad predicate"):
            dispatcher.evaluate()
        assert later_checked == []
        assert rec.calls == []

    def test_action_error_propagates_without_fallback(self) -> None:
        rec = _Recorder()

        def fail() -> None:
            raise ZeroDivisionError

        dispatcher = (
            Dispatcher(1)
            .add_case(lambda v: True, fail)
            .add_case(lambda v: True, rec.action("second"))
            .set_fallback(rec.action("fallback"))
        )
        with pytest.raises(ZeroDivisionError):
            dispatcher.evaluate()
        assert rec.calls == []

    def test_fallback_error_propagates(self) -> None:
        def fail() -> None:
            raise RuntimeError("fallback failed")

        dispatcher = Dispatcher(1).set_fallback(fail)
        with pytest.raises(RuntimeError, match="fallback failed"):
            dispatcher.evaluate()


class TestDispatcherState:
    def test_cases_keep_insertion_order(self) -> None:
        preds = [lambda v: v == 3, lambda v: v == 1, lambda v: v == 2]
        dispatcher = Dispatcher(0)
        for pred in preds:
            dispatcher.add_case(pred, lambda: None)
        assert [c.predicate for c in dispatcher.cases] == preds
        assert len(dispatcher) == 3

    def test_duplicate_cases_are_kept(self) -> None:
        pred = lambda v: True  # noqa: E731
        dispatcher = Dispatcher(0).add_case(pred, lambda: None)
        dispatcher.add_case(pred, lambda: None)
        assert len(dispatcher) == 2

    def test_value_is_passed_unchanged(self) -> None:
        payload = {"k": [1, 2]}
        seen: list[object] = []

        def capture(v: object) -> bool:
            seen.append(v)
            return False

        dispatcher = Dispatcher(payload).add_case(capture, lambda: None)
        dispatcher.evaluate()
        assert seen[0] is payload
        assert dispatcher.value is payload

    def test_evaluate_can_run_again(self) -> None:
        rec = _Recorder()
        dispatcher = Dispatcher(1).add_case(lambda v: True, rec.action("hit"))
        dispatcher.evaluate()
        dispatcher.evaluate()
        assert rec.calls == ["hit", "hit"]

    def test_actions_see_enclosing_state(self) -> None:
        state = {"count": 0}

        def bump() -> None:
            state["count"] += 1

        dispatcher = Dispatcher(5)
        dispatcher.add_case(lambda v: v == state["count"] + 5, bump)
        dispatcher.evaluate()
        assert state["count"] == 1

    def test_separate_dispatchers_on_threads(self) -> None:
        results: dict[int, str] = {}
        lock = threading.Lock()

        def work(value: int) -> None:
            def record(label: str):
                def run() -> None:
                    with lock:
                        results[value] = label

                return run

            (
                Dispatcher(value)
                .add_case(lambda v: v % 2 == 0, record("even"))
                .set_fallback(record("odd"))
                .evaluate()
            )

        threads = [threading.Thread(target=work, args=(i,)) for i in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert results == {
            i: "even" if i % 2 == 0 else "odd" for i in range(8)
        }


class TestMatchFirst:
    def test_registers_pairs_in_order(self) -> None:
        rec = _Recorder()
        matched = match_first(
            "Hello Gerard!",
            [
                (lambda s: "Gerard" in s, rec.action("greet")),
                (lambda s: len(s) > 10, rec.action("long")),
            ],
            default=rec.action("other"),
        )
        assert matched is True
        assert rec.calls == ["greet"]

    def test_default_runs_when_unmatched(self) -> None:
        rec = _Recorder()
        matched = match_first(
            "hi",
            [(lambda s: len(s) > 10, rec.action("long"))],
            default=rec.action("other"),
        )
        assert matched is False
        assert rec.calls == ["other"]

    def test_without_default_is_silent(self) -> None:
        rec = _Recorder()
        assert match_first(3, [(lambda v: v == 10, rec.action("ten"))]) is False
        assert rec.calls == []

    def test_accepts_generator_of_pairs(self) -> None:
        rec = _Recorder()
        pairs = ((lambda v, k=k: v == k, rec.action(str(k))) for k in range(5))
        match_first(3, pairs)
        assert rec.calls == ["3"]
