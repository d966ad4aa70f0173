"""
Refresh Ticket Tests
====================

INVARIANTS TESTED:
1. No ticket before a diagram is bound
2. Rebinding or cancelling makes earlier tickets stale
3. Stale tickets report why they were rejected
4. Once a ticket is applied, earlier tickets are out of order
"""

from futures_wheel.temporal.refresh import RefreshCoordinator


class TestRefreshCoordinator:

    def test_no_ticket_without_diagram(self):
        assert RefreshCoordinator().issue() is None

    def test_current_ticket_accepted(self):
        coordinator = RefreshCoordinator()
        coordinator.bind("wheel-1")

        ticket = coordinator.issue()

        assert ticket.diagram_id == "wheel-1"
        assert coordinator.rejection_reason(ticket) is None

    def test_sequences_increase(self):
        coordinator = RefreshCoordinator()
        coordinator.bind("wheel-1")

        first = coordinator.issue()
        second = coordinator.issue()

        assert second.sequence > first.sequence
        assert coordinator.rejection_reason(first) is None

    def test_rebind_makes_ticket_stale(self):
        coordinator = RefreshCoordinator()
        coordinator.bind("wheel-1")
        ticket = coordinator.issue()

        coordinator.bind("wheel-2")

        assert coordinator.rejection_reason(ticket) == "diagram changed"

    def test_reload_same_diagram_supersedes(self):
        coordinator = RefreshCoordinator()
        coordinator.bind("wheel-1")
        ticket = coordinator.issue()

        coordinator.bind("wheel-1")

        assert coordinator.rejection_reason(ticket) == "superseded"

    def test_cancel_supersedes(self):
        coordinator = RefreshCoordinator()
        coordinator.bind("wheel-1")
        ticket = coordinator.issue()

        coordinator.cancel()

        assert coordinator.rejection_reason(ticket) == "superseded"
        assert coordinator.rejection_reason(coordinator.issue()) is None

    def test_earlier_ticket_out_of_order_after_apply(self):
        coordinator = RefreshCoordinator()
        coordinator.bind("wheel-1")
        first = coordinator.issue()
        second = coordinator.issue()

        coordinator.mark_applied(second)

        assert coordinator.rejection_reason(first) == "out of order"
        assert coordinator.rejection_reason(second) is None

    def test_applying_older_ticket_keeps_watermark(self):
        coordinator = RefreshCoordinator()
        coordinator.bind("wheel-1")
        first = coordinator.issue()
        second = coordinator.issue()
        third = coordinator.issue()

        coordinator.mark_applied(third)
        coordinator.mark_applied(first)

        assert coordinator.rejection_reason(second) == "out of order"

    def test_generation_checked_before_order(self):
        coordinator = RefreshCoordinator()
        coordinator.bind("wheel-1")
        first = coordinator.issue()
        coordinator.mark_applied(coordinator.issue())

        coordinator.cancel()

        assert coordinator.rejection_reason(first) == "superseded"
