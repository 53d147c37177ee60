"""
Tests for debounced filter values.
"""

from eventi.web.debounce import DEBOUNCE_SECONDS, Debounced


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestDebounced:
    """Tests for Debounced."""

    def test_settles_after_quiet_period(self):
        clock = FakeClock()
        value = Debounced("", clock=clock)
        value.set("napoli")
        assert value.value == "napoli"
        assert value.settled == ""
        assert value.pending

        clock.now = DEBOUNCE_SECONDS
        assert value.settled == "napoli"
        assert not value.pending

    def test_each_edit_restarts_the_wait(self):
        clock = FakeClock()
        value = Debounced("", delay=0.3, clock=clock)
        value.set("n")
        clock.now = 0.2
        value.set("na")
        clock.now = 0.4
        assert value.settled == ""
        assert 0 < value.remaining() <= 0.1 + 1e-9
        clock.now = 0.6
        assert value.settled == "na"
        assert value.remaining() == 0.0

    def test_intermediate_values_never_settle(self):
        clock = FakeClock()
        value = Debounced("", delay=0.3, clock=clock)
        seen = []
        for step, text in enumerate(["s", "sa", "sag", "sagra"]):
            clock.now = step * 0.1
            value.set(text)
            seen.append(value.settled)
        clock.now = 1.0
        seen.append(value.settled)
        assert set(seen) == {"", "sagra"}

    def test_reset_settles_immediately(self):
        value = Debounced("", clock=FakeClock())
        value.reset("salerno")
        assert value.settled == "salerno"
        assert not value.pending
