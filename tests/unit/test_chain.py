"""
Tests for FilterChain - Ordered, breakable chain of filters.

This test suite covers:
1. Traversal order and re-entrant next()
2. Disregard behavior from every state
3. Mutation rejected while in use
4. Insert positions
5. Construction errors
6. Exceptions raised by filters
"""

import pytest

from filterchain.core.chain import FilterChain
from filterchain.core.errors import (
    ChainBusyError,
    ChainError,
    ChainIndexError,
    InvalidArgumentError,
)
from filterchain.core.filter import Filter


class Recorder(Filter):
    """Records the events it sees; forwards them unless told otherwise."""

    def __init__(self, name, log, forward=True):
        self.name = name
        self.log = log
        self.forward = forward

    def process(self, event, chain):
        self.log.append((self.name, event))
        if self.forward:
            chain.next(event)


class Passive(Filter):
    """Records the event and returns without continuing the chain."""

    def __init__(self, name, log):
        self.name = name
        self.log = log

    def process(self, event, chain):
        self.log.append(self.name)


class TestTraversal:
    """Test routing events through the chain."""

    def test_forwarding_filters_run_in_order(self):
        """Each filter should see the event once, in insertion order."""
        log = []
        disregarded = []
        chain = FilterChain(disregarded.append)
        chain.add(Recorder("A", log))
        chain.add(Recorder("B", log))
        chain.add(Recorder("C", log))

        chain.next("e0")

        assert log == [("A", "e0"), ("B", "e0"), ("C", "e0")]
        assert not chain.filter_is_being_used()
        assert disregarded == []

    def test_filters_may_forward_transformed_events(self):
        """The event passed on by next() reaches the following filter."""
        seen = []

        def first(event, chain):
            seen.append(event)
            chain.next("e1")

        def second(event, chain):
            seen.append(event)
            chain.next("e2")

        def third(event, chain):
            seen.append(event)
            chain.next("e3")

        chain = FilterChain()
        chain.add_all([first, second, third])

        chain.next("e0")

        assert seen == ["e0", "e1", "e2"]
        assert not chain.filter_is_being_used()

    def test_in_use_during_traversal(self):
        """The chain reports in use while filters run, idle after the end."""
        states = []

        def observe(event, chain):
            states.append(chain.filter_is_being_used())
            chain.next(event)

        chain = FilterChain()
        chain.add_all([observe, observe, observe])

        chain.next("e")

        assert states == [True, True, True]
        assert not chain.filter_is_being_used()

    def test_size_plus_one_next_calls_return_to_idle(self):
        """Driving non-forwarding filters externally needs size()+1 next() calls."""
        log = []
        chain = FilterChain()
        chain.add_all([Passive("A", log), Passive("B", log), Passive("C", log)])

        for _ in range(chain.size()):
            chain.next("e")
            assert chain.filter_is_being_used()

        chain.next("e")

        assert log == ["A", "B", "C"]
        assert not chain.filter_is_being_used()

    def test_in_use_after_first_next_idle_after_last(self):
        """Scenario [A, B, C] driven step by step from outside."""
        log = []
        chain = FilterChain()
        chain.add_all([Passive("A", log), Passive("B", log), Passive("C", log)])

        chain.next("e0")
        assert chain.filter_is_being_used()
        assert log == ["A"]

        chain.next("e1")
        chain.next("e2")
        assert log == ["A", "B", "C"]
        assert chain.filter_is_being_used()

        chain.next("e3")
        assert log == ["A", "B", "C"]
        assert not chain.filter_is_being_used()

    def test_empty_chain_next_is_a_no_op(self):
        """next() on an empty chain returns idle without error."""
        disregarded = []
        chain = FilterChain(disregarded.append)

        chain.next("e")

        assert chain.size() == 0
        assert not chain.filter_is_being_used()
        assert disregarded == []

    def test_chain_is_reusable_across_traversals(self):
        """A finished traversal lets the next one start from the first filter."""
        log = []
        chain = FilterChain()
        chain.add(Recorder("A", log))
        chain.add(Recorder("B", log))

        chain.next(1)
        chain.next(2)

        assert log == [("A", 1), ("B", 1), ("A", 2), ("B", 2)]

    def test_filter_without_process_base_class(self):
        """Objects with a process() method work without inheriting Filter."""
        log = []

        class Duck:
            def process(self, event, chain):
                log.append(event)
                chain.next(event)

        chain = FilterChain()
        chain.add(Duck())
        chain.next("quack")

        assert log == ["quack"]


class TestDisregard:
    """Test aborting the chain."""

    def test_disregard_skips_remaining_filters(self):
        """Scenario [A, B] where A disregards: B never runs."""
        log = []
        disregarded = []

        def a(event, chain):
            log.append("A")
            chain.disregard("bad")

        chain = FilterChain(disregarded.append)
        chain.add(a)
        chain.add(Recorder("B", log))

        chain.next("e")

        assert log == ["A"]
        assert disregarded == ["bad"]
        assert not chain.filter_is_being_used()

    def test_disregard_mid_chain(self):
        """Disregarding in the middle stops the rest of the chain."""
        log = []
        disregarded = []

        def gate(event, chain):
            log.append("gate")
            chain.disregard(f"rejected {event}")

        chain = FilterChain(disregarded.append)
        chain.add(Recorder("A", log))
        chain.add(gate)
        chain.add(Recorder("C", log))

        chain.next(7)

        assert log == [("A", 7), "gate"]
        assert disregarded == ["rejected 7"]

    def test_disregard_while_idle_still_calls_back(self):
        """disregard() on an idle chain fires the callback once."""
        disregarded = []
        chain = FilterChain(disregarded.append)

        chain.disregard("nothing running")

        assert disregarded == ["nothing running"]
        assert not chain.filter_is_being_used()

    def test_disregard_from_every_cursor_position(self):
        """From any in-use position, disregard returns the chain to idle."""
        log = []
        for steps in range(1, 4):
            disregarded = []
            chain = FilterChain(disregarded.append)
            chain.add_all([Passive("A", log), Passive("B", log), Passive("C", log)])
            for _ in range(steps):
                chain.next("e")
            assert chain.filter_is_being_used()

            chain.disregard(f"stop at {steps}")

            assert disregarded == [f"stop at {steps}"]
            assert not chain.filter_is_being_used()

    def test_disregard_each_call_fires_once(self):
        """Repeated disregard() calls each invoke the callback exactly once."""
        disregarded = []
        chain = FilterChain(disregarded.append)

        chain.disregard("one")
        chain.disregard("two")

        assert disregarded == ["one", "two"]

    def test_after_disregard_traversal_restarts(self):
        """next() after disregard starts again at the first filter."""
        log = []
        chain = FilterChain()
        chain.add_all([Passive("A", log), Passive("B", log)])

        chain.next("e")
        chain.disregard("abort")
        chain.next("e")

        assert log == ["A", "A"]

    def test_idle_disregard_warning_when_enabled(self):
        """warn_on_idle_disregard reports disregard() on an idle chain."""
        disregarded = []
        chain = FilterChain(disregarded.append, name="audit", warn_on_idle_disregard=True)

        with pytest.warns(RuntimeWarning, match="'audit' disregarded while idle"):
            chain.disregard("late")

        assert disregarded == ["late"]

    def test_no_warning_when_in_use(self, recwarn):
        """Disregarding a running traversal never warns."""
        chain = FilterChain(name="audit", warn_on_idle_disregard=True)
        chain.add(lambda event, chain: chain.disregard("stop"))

        chain.next("e")

        assert len(recwarn) == 0

    def test_reset_returns_to_idle_silently(self):
        """reset() clears the traversal without calling the disregard callback."""
        disregarded = []
        chain = FilterChain(disregarded.append)
        chain.add(Passive("A", []))

        chain.next("e")
        chain.reset()

        assert not chain.filter_is_being_used()
        assert disregarded == []


class TestMutation:
    """Test adding filters."""

    def test_add_rejected_while_in_use(self):
        """add(), add_all() and add_at() raise ChainBusyError during a traversal."""
        chain = FilterChain()
        chain.add(Passive("A", []))
        chain.next("e")

        with pytest.raises(ChainBusyError, match="currently in use"):
            chain.add(Passive("B", []))
        with pytest.raises(ChainBusyError):
            chain.add_all([Passive("B", [])])
        with pytest.raises(ChainBusyError):
            chain.add_at(0, Passive("B", []))

        assert chain.size() == 1

    def test_add_from_inside_a_filter_rejected(self):
        """A filter cannot modify the chain it runs in."""
        errors = []

        def greedy(event, chain):
            try:
                chain.add(Passive("late", []))
            except ChainBusyError as e:
                errors.append(e)
            chain.next(event)

        chain = FilterChain()
        chain.add(greedy)
        chain.next("e")

        assert len(errors) == 1
        assert chain.size() == 1

    def test_busy_check_precedes_position_check(self):
        """An invalid position on a busy chain reports ChainBusyError."""
        chain = FilterChain()
        chain.add(Passive("A", []))
        chain.next("e")

        with pytest.raises(ChainBusyError):
            chain.add_at(99, Passive("B", []))

    def test_add_allowed_again_after_traversal(self):
        """Once idle, the chain accepts filters again."""
        chain = FilterChain()
        chain.add(Passive("A", []))
        chain.next("e")
        chain.disregard("done")

        chain.add(Passive("B", []))

        assert chain.size() == 2

    def test_add_all_preserves_order(self):
        """add_all() appends in the given order after existing filters."""
        log = []
        chain = FilterChain()
        chain.add(Recorder("A", log))
        chain.add_all(Recorder(n, log) for n in ("B", "C"))

        chain.next("e")

        assert [name for name, _ in log] == ["A", "B", "C"]

    def test_add_all_is_atomic(self):
        """A bad element leaves the chain unchanged."""
        chain = FilterChain()
        chain.add(Passive("A", []))

        with pytest.raises(InvalidArgumentError):
            chain.add_all([Passive("B", []), 42, Passive("C", [])])

        assert chain.size() == 1

    def test_add_rejects_non_filters(self):
        """Objects that are neither filters nor callables are rejected."""
        chain = FilterChain()

        with pytest.raises(InvalidArgumentError, match="Expected a Filter"):
            chain.add("not a filter")
        with pytest.raises(InvalidArgumentError, match="must not be None"):
            chain.add(None)

    def test_filters_snapshot(self):
        """filters returns the chain's filters in order and can't alter the chain."""
        a, b = Passive("A", []), Passive("B", [])
        chain = FilterChain()
        chain.add_all([a, b])

        snapshot = chain.filters

        assert snapshot == (a, b)
        assert len(chain) == 2

    @pytest.mark.parametrize("batch", [None, 42, object()])
    def test_add_all_rejects_non_iterables(self, batch):
        """add_all() needs an iterable of filters; the chain is left unchanged."""
        chain = FilterChain()

        with pytest.raises(InvalidArgumentError, match="Expected an iterable of filters"):
            chain.add_all(batch)

        assert chain.size() == 0


class TestAddAt:
    """Test inserting filters at positions."""

    def _names(self, chain):
        return [f.name for f in chain.filters]

    def test_prepend(self):
        """Position 0 inserts before all existing filters."""
        chain = FilterChain()
        chain.add_all([Passive("B", []), Passive("C", [])])

        chain.add_at(0, Passive("A", []))

        assert self._names(chain) == ["A", "B", "C"]

    def test_insert_in_middle_shifts_right(self):
        """Filters at and after the position move one to the right."""
        chain = FilterChain()
        chain.add_all([Passive("A", []), Passive("C", [])])

        chain.add_at(1, Passive("B", []))

        assert self._names(chain) == ["A", "B", "C"]

    def test_position_equal_to_size_appends(self):
        """Position size() is a valid append."""
        chain = FilterChain()
        chain.add_all([Passive("A", []), Passive("B", [])])

        chain.add_at(chain.size(), Passive("C", []))

        assert self._names(chain) == ["A", "B", "C"]

    def test_insert_into_empty_chain(self):
        """Position 0 on an empty chain is valid."""
        chain = FilterChain()

        chain.add_at(0, Passive("A", []))

        assert self._names(chain) == ["A"]

    @pytest.mark.parametrize("position", [-1, -5, 3, 10])
    def test_out_of_range_positions(self, position):
        """Negative positions and positions past size() are rejected."""
        chain = FilterChain()
        chain.add_all([Passive("A", []), Passive("B", [])])

        with pytest.raises(ChainIndexError, match="out of range"):
            chain.add_at(position, Passive("X", []))

        assert chain.size() == 2

    def test_index_error_is_an_index_error(self):
        """ChainIndexError can be caught as IndexError."""
        chain = FilterChain()

        with pytest.raises(IndexError):
            chain.add_at(1, Passive("X", []))


class TestConstruction:
    """Test chain construction."""

    def test_default_callback_is_no_op(self):
        """Without a callback, disregard() simply resets the chain."""
        chain = FilterChain()
        chain.add(Passive("A", []))
        chain.next("e")

        chain.disregard("ignored")

        assert not chain.filter_is_being_used()

    def test_none_callback_rejected(self):
        """Explicitly passing None is an error."""
        with pytest.raises(InvalidArgumentError, match="must be callable"):
            FilterChain(None)

    def test_non_callable_callback_rejected(self):
        """Callbacks must be callable."""
        with pytest.raises(InvalidArgumentError):
            FilterChain("print")

    def test_invalid_argument_is_a_value_error(self):
        """InvalidArgumentError can be caught as ValueError and ChainError."""
        with pytest.raises(ValueError):
            FilterChain(None)
        with pytest.raises(ChainError):
            FilterChain(None)

    def test_new_chain_is_idle_and_empty(self):
        """A fresh chain is idle with no filters."""
        chain = FilterChain(name="fresh")

        assert chain.size() == 0
        assert not chain.filter_is_being_used()
        assert repr(chain) == "FilterChain(fresh, size=0, idle)"


class TestFilterErrors:
    """Test exceptions raised by filters."""

    def test_filter_exception_propagates(self):
        """The chain doesn't catch filter exceptions."""

        def broken(event, chain):
            raise ValueError("boom")

        chain = FilterChain()
        chain.add(broken)

        with pytest.raises(ValueError, match="boom"):
            chain.next("e")

    def test_chain_stays_in_use_after_filter_exception(self):
        """A failed traversal keeps the chain in use until disregard or reset."""

        def broken(event, chain):
            raise ValueError("boom")

        chain = FilterChain()
        chain.add(broken)

        with pytest.raises(ValueError):
            chain.next("e")

        assert chain.filter_is_being_used()
        with pytest.raises(ChainBusyError):
            chain.add(Passive("A", []))

        chain.reset()
        chain.add(Passive("A", []))
        assert chain.size() == 2

    def test_disregard_callback_exception_propagates(self):
        """Errors from the disregard callback reach the disregard() caller."""

        def explode(message):
            raise RuntimeError(message)

        chain = FilterChain(explode)

        with pytest.raises(RuntimeError, match="why"):
            chain.disregard("why")

        assert not chain.filter_is_being_used()
