"""Tests for the freshness monitor circuit breaker."""

import pytest

from servesync.services.state_machine import CircuitState, MonitorCircuitBreaker


class TestMonitorCircuitBreaker:
    """Test circuit breaker transitions and delays."""

    @pytest.fixture
    def circuit(self) -> MonitorCircuitBreaker:
        return MonitorCircuitBreaker(poll_interval=45, threshold=3, max_backoff=120)

    def test_initial_state(self, circuit: MonitorCircuitBreaker) -> None:
        """Test a fresh breaker."""
        assert circuit.state is CircuitState.CLOSED
        assert circuit.is_open is False
        assert circuit.consecutive_failures == 0
        assert circuit.next_delay() == 45

    def test_begin_check_when_closed(self, circuit: MonitorCircuitBreaker) -> None:
        """Test that normal checks are not trials."""
        assert circuit.begin_check() is False
        assert circuit.state is CircuitState.CLOSED

    def test_opens_after_threshold(self, circuit: MonitorCircuitBreaker) -> None:
        """Test that the circuit opens on the third consecutive failure."""
        circuit.handle_failure()
        circuit.handle_failure()
        assert circuit.state is CircuitState.CLOSED

        circuit.handle_failure()

        assert circuit.state is CircuitState.OPEN
        assert circuit.consecutive_failures == 3

    def test_network_failure_backs_off(self, circuit: MonitorCircuitBreaker) -> None:
        """Test the delay after a network failure below the threshold."""
        circuit.handle_failure(network=True)

        assert circuit.next_delay() == 90

    def test_backoff_is_capped(self) -> None:
        """Test that the network backoff never exceeds max_backoff."""
        circuit = MonitorCircuitBreaker(poll_interval=90, threshold=3, max_backoff=120)
        circuit.handle_failure(network=True)

        assert circuit.next_delay() == 120

    def test_structural_failure_keeps_interval(self, circuit: MonitorCircuitBreaker) -> None:
        """Test that non-network failures keep the normal interval while closed."""
        circuit.handle_failure(network=False)

        assert circuit.next_delay() == 45

    def test_open_circuit_doubles_interval(self, circuit: MonitorCircuitBreaker) -> None:
        """Test the delay while open."""
        for _ in range(3):
            circuit.handle_failure(network=False)

        assert circuit.next_delay() == 90

    def test_half_open_trial_success_closes(self, circuit: MonitorCircuitBreaker) -> None:
        """Test that one successful trial closes the circuit."""
        for _ in range(3):
            circuit.handle_failure()

        assert circuit.begin_check() is True
        assert circuit.state is CircuitState.HALF_OPEN

        circuit.handle_success()

        assert circuit.state is CircuitState.CLOSED
        assert circuit.consecutive_failures == 0
        assert circuit.next_delay() == 45

    def test_half_open_trial_failure_reopens(self, circuit: MonitorCircuitBreaker) -> None:
        """Test that a failed trial keeps the circuit open."""
        for _ in range(3):
            circuit.handle_failure()
        circuit.begin_check()

        circuit.handle_failure()

        assert circuit.state is CircuitState.OPEN
        assert circuit.consecutive_failures == 4

    def test_success_resets_failure_count(self, circuit: MonitorCircuitBreaker) -> None:
        """Test that failures must be consecutive to open the circuit."""
        circuit.handle_failure()
        circuit.handle_failure()
        circuit.handle_success()
        circuit.handle_failure()

        assert circuit.state is CircuitState.CLOSED
        assert circuit.consecutive_failures == 1

    def test_reset(self, circuit: MonitorCircuitBreaker) -> None:
        """Test manual reset."""
        for _ in range(3):
            circuit.handle_failure()

        circuit.reset()

        assert circuit.state is CircuitState.CLOSED
        assert circuit.consecutive_failures == 0

    def test_get_stats(self, circuit: MonitorCircuitBreaker) -> None:
        """Test statistics for logging."""
        circuit.handle_failure()

        assert circuit.get_stats() == {
            "state": "closed",
            "consecutive_failures": 1,
            "next_delay": 90,
        }
