import unittest
import threading
from unittest.mock import MagicMock

from ndn_socket_bridge.notify import (ERROR_PREFIX, CallbackSink, Notifier, NotificationSink,
                                      QueuedNotifier)
from ndn_socket_bridge.logger import LogLevel
from responders import RecordingSink

class ExplodingSink(NotificationSink):
    def on_ready(self):
        raise RuntimeError("host gone")

    def on_interest_received(self, ip_address, port, payload_hex):
        raise RuntimeError("host gone")

class TestNotifier(unittest.TestCase):
    def setUp(self):
        self.sink = RecordingSink()
        self.logger = MagicMock()
        self.notifier = Notifier(self.sink, self.logger)

    def test_error_prefix(self):
        self.assertTrue(self.notifier.error("boom"))
        self.assertEqual(self.sink.errors, [ERROR_PREFIX + "boom"])

    def test_ready_and_interest(self):
        self.notifier.ready()
        self.notifier.interest_received("10.0.0.1", 5000, "00ff")
        self.assertEqual(self.sink.ready_count, 1)
        self.assertEqual(self.sink.interests, [("10.0.0.1", 5000, "00ff")])

    def test_failing_callback_is_swallowed_and_logged(self):
        sink = MagicMock()
        sink.on_interest_received.side_effect = ValueError("bad host state")
        notifier = Notifier(sink, self.logger)
        self.assertFalse(notifier.interest_received("1.2.3.4", 1, "aa"))
        self.assertEqual(notifier.failed_deliveries, 1)
        levels = [c.args[0] for c in self.logger.log.call_args_list]
        self.assertIn(LogLevel.ERROR, levels)
        # The failure is surfaced to the host through on_error.
        sink.on_error.assert_called_once()
        self.assertIn("on_interest_received callback failed", sink.on_error.call_args.args[0])

    def test_failing_error_callback_does_not_recurse(self):
        sink = MagicMock()
        sink.on_error.side_effect = RuntimeError("nope")
        notifier = Notifier(sink, self.logger)
        self.assertFalse(notifier.error("first"))
        self.assertEqual(sink.on_error.call_count, 1)
        self.assertEqual(notifier.failed_deliveries, 1)

    def test_everything_failing_never_raises(self):
        sink = ExplodingSink()
        sink.on_error = MagicMock(side_effect=RuntimeError("also gone"))
        notifier = Notifier(sink, self.logger)
        self.assertFalse(notifier.ready())
        self.assertFalse(notifier.interest_received("1.2.3.4", 1, ""))
        self.assertEqual(notifier.failed_deliveries, 4)

    def test_deliveries_are_serialized(self):
        active = []
        overlap = []

        class Probe(NotificationSink):
            def on_interest_received(self, ip_address, port, payload_hex):
                active.append(1)
                if len(active) > 1: overlap.append(1)
                threading.Event().wait(0.001)
                active.pop()

        notifier = Notifier(Probe(), self.logger)
        threads = [threading.Thread(target=lambda: [notifier.interest_received("h", 1, "00") for _ in range(20)])
                   for _ in range(4)]
        for t in threads: t.start()
        for t in threads: t.join()
        self.assertEqual(overlap, [])

class TestCallbackSink(unittest.TestCase):
    def test_named_callbacks(self):
        ready, error, interest = MagicMock(), MagicMock(), MagicMock()
        notifier = Notifier(CallbackSink(ready, error, interest), MagicMock())
        notifier.ready()
        notifier.error("x")
        notifier.interest_received("127.0.0.1", 9876, "ab")
        ready.assert_called_once_with()
        error.assert_called_once_with(ERROR_PREFIX + "x")
        interest.assert_called_once_with("127.0.0.1", 9876, "ab")

    def test_missing_callbacks_are_ignored(self):
        notifier = Notifier(CallbackSink(), MagicMock())
        self.assertTrue(notifier.ready())
        self.assertTrue(notifier.interest_received("h", 1, ""))

class TestQueuedNotifier(unittest.TestCase):
    def setUp(self):
        self.sink = RecordingSink()
        self.queued = QueuedNotifier(Notifier(self.sink, MagicMock()), maxsize=4)

    def tearDown(self):
        self.queued.close()

    def test_preserves_order(self):
        for i in range(20):
            self.queued.interest_received("h", i, f"{i:02x}")
        self.queued.error("late")
        self.assertTrue(self.queued.flush(2.0))
        self.assertEqual([i[1] for i in self.sink.interests], list(range(20)))
        self.assertEqual(self.sink.errors, [ERROR_PREFIX + "late"])

    def test_close_drains_pending_events(self):
        for i in range(3):
            self.queued.interest_received("h", i, "")
        self.queued.close()
        self.assertEqual(len(self.sink.interests), 3)

    def test_after_close_delivers_inline(self):
        self.queued.close()
        self.queued.ready()
        self.assertEqual(self.sink.ready_count, 1)
        self.assertTrue(self.queued.flush())

if __name__ == '__main__':
    unittest.main()
