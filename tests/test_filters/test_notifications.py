"""Tests for the notification queue."""

from src.filters.notifications import ZERO_RESULTS_MESSAGE, NotificationCenter, Severity


class TestNotificationCenter:
    """Tests for NotificationCenter."""

    def test_add_assigns_ids_and_defaults(self, clock):
        center = NotificationCenter(clock)
        first = center.add("Hello")
        second = center.add("World", Severity.WARNING, duration_ms=1000)

        assert first.id == "notification-0"
        assert second.id == "notification-1"
        assert first.severity == Severity.INFO
        assert first.duration_ms == 5000
        assert first.created_at == clock.now

    def test_auto_cleared_message(self, clock):
        center = NotificationCenter(clock)
        notification = center.notify_auto_cleared(["Play Type"], "volleyball-specific play type")
        assert notification.message == "Cleared Play Type (volleyball-specific play type)"
        assert notification.severity == Severity.INFO

    def test_zero_results_is_warning(self, clock):
        notification = NotificationCenter(clock).notify_zero_results()
        assert notification.message == ZERO_RESULTS_MESSAGE
        assert notification.severity == Severity.WARNING

    def test_expiry(self, clock):
        center = NotificationCenter(clock)
        center.add("short", duration_ms=1000)
        sticky = center.add("sticky", duration_ms=0)

        clock.advance(2)
        assert center.active() == [sticky]
        assert center.all == [sticky]

    def test_dismiss_and_clear(self, clock):
        center = NotificationCenter(clock)
        notification = center.add("one")
        center.add("two")

        assert center.dismiss(notification.id) is True
        assert center.dismiss(notification.id) is False
        assert len(center.all) == 1

        center.clear()
        assert center.all == []

    def test_subscribers(self, clock):
        center = NotificationCenter(clock)
        received = []
        unsubscribe = center.subscribe(received.append)

        center.add("one")
        unsubscribe()
        center.add("two")

        assert [n.message for n in received] == ["one"]

    def test_to_dict(self, clock):
        data = NotificationCenter(clock).add("hi", "error").to_dict()
        assert data["severity"] == "error"
        assert data["message"] == "hi"
