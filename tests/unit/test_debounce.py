"""
Unit tests for Debouncer and RequestGeneration.

Timers are faked so nothing sleeps; a test fires the live timer by hand.
"""
import threading

from coachsearching.utils.debounce import Debouncer, RequestGeneration


class TestDebouncer:
    """Tests for the debouncer."""

    def test_rapid_calls_collapse_to_last_value(self, fake_timer):
        """Test N calls inside the quiet period produce one callback with the last value."""
        calls = []
        debouncer = Debouncer(0.3, calls.append, timer_factory=fake_timer)

        for text in ["l", "li", "lif", "life"]:
            debouncer.call(text)

        live = fake_timer.live()
        assert len(live) == 1
        assert live[0].delay == 0.3
        live[0].fire()

        assert calls == ["life"]
        assert debouncer.pending is False

    def test_superseded_timers_are_cancelled(self, fake_timer):
        """Test each new call cancels the previous timer."""
        debouncer = Debouncer(0.3, lambda v: None, timer_factory=fake_timer)
        debouncer.call("a")
        debouncer.call("b")

        assert fake_timer.created[0].cancelled is True
        assert fake_timer.created[1].cancelled is False
        assert fake_timer.created[1].delay == 0.3

    def test_cancel_drops_pending_call(self, fake_timer):
        """Test cancel prevents the callback."""
        calls = []
        debouncer = Debouncer(0.3, calls.append, timer_factory=fake_timer)
        debouncer.call("x")
        debouncer.cancel()

        # Even a timer that slipped through finds nothing to run
        fake_timer.created[0].fn()
        assert calls == []
        assert debouncer.pending is False

    def test_superseded_timer_that_still_runs_is_ignored(self, fake_timer):
        """Test a cancelled timer whose callback runs anyway neither fires nor clears the new one."""
        calls = []
        debouncer = Debouncer(0.3, calls.append, timer_factory=fake_timer)
        debouncer.call("a")
        debouncer.call("b")

        # threading.Timer.cancel() cannot stop a callback already under way
        fake_timer.created[0].fn()

        assert calls == []
        assert debouncer.pending is True

        fake_timer.created[1].fire()
        assert calls == ["b"]
        assert debouncer.pending is False

    def test_flush_runs_immediately(self, fake_timer):
        """Test flush runs the pending call now."""
        calls = []
        debouncer = Debouncer(0.3, calls.append, timer_factory=fake_timer)
        debouncer.call("now")

        assert debouncer.flush() is True
        assert calls == ["now"]
        assert debouncer.flush() is False

    def test_callback_errors_are_contained(self, fake_timer):
        """Test an exception in the callback does not escape the timer."""
        def boom(value):
            raise RuntimeError("fail")

        debouncer = Debouncer(0.3, boom, timer_factory=fake_timer)
        debouncer.call("x")
        fake_timer.live()[0].fire()

        assert debouncer.pending is False

    def test_real_timer(self):
        """Test the default threading.Timer path fires once."""
        fired = threading.Event()
        values = []

        def callback(value):
            values.append(value)
            fired.set()

        debouncer = Debouncer(0.2, callback)
        debouncer.call("a")
        debouncer.call("b")

        assert fired.wait(2.0)
        assert values == ["b"]


class TestRequestGeneration:
    """Tests for stale-response tokens."""

    def test_latest_token_is_current(self):
        """Test only the newest token is current."""
        generation = RequestGeneration()
        first = generation.next()
        second = generation.next()

        assert generation.is_current(second) is True
        assert generation.is_current(first) is False

    def test_invalidate(self):
        """Test invalidate makes outstanding tokens stale."""
        generation = RequestGeneration()
        token = generation.next()
        generation.invalidate()

        assert generation.is_current(token) is False
        assert generation.current == token + 1
