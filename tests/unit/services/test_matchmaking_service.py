"""Unit tests for the matchmaking driver loop."""

import logging
import threading

import pytest

from mmp.match import ManualClock, MatchmakingPool, Player
from mmp.services.matchmaking_service import MatchmakingService, build_service


@pytest.fixture
def emitted():
    return []


@pytest.fixture
def service(pool, clock, emitted):
    return MatchmakingService(pool, emitted.append, clock=clock, retry_delay=0.01, continue_as_new_after=0)


def test_step_admits_and_matches(service, clock, emitted):
    service.submit_arrival(Player("A", 50, "NA"))
    service.submit_arrival(Player("B", 55, "NA"))
    service.submit_arrival(Player("C", 90, "EU"))

    matches = service.step()

    assert [m.player_ids for m in matches] == [("A", "B")]
    assert [m.player_ids for m in emitted] == [("A", "B")]
    assert [p.id for p in service.pool.players()] == ["C"]
    assert service.matches_emitted == 1


def test_step_without_commands_retries_on_timer(service, clock, emitted):
    service.submit_arrival(Player("A", 50, "NA"))
    service.submit_arrival(Player("C", 90, "EU"))
    service.step()
    assert emitted == []

    clock.advance(10)
    assert service.step() == []

    clock.advance(21)
    matches = service.step()
    assert [m.player_ids for m in matches] == [("A", "C")]


def test_arrivals_stamped_with_clock_time(service, clock):
    clock.set(42.0)
    service.submit_arrival(Player("A", 50, "NA"))
    service.step()

    assert service.pool.players()[0].joined_at == 42.0


def test_withdrawal_before_match(service, emitted):
    service.submit_arrival(Player("A", 50, "NA"))
    service.submit_withdrawal("A")
    service.submit_arrival(Player("B", 55, "NA"))

    service.step()

    assert emitted == []
    assert [p.id for p in service.pool.players()] == ["B"]


def test_withdrawal_of_matched_player_is_harmless(service, emitted):
    service.submit_arrival(Player("A", 50, "NA"))
    service.submit_arrival(Player("B", 55, "NA"))
    service.step()

    service.submit_withdrawal("A")
    service.step()

    assert len(emitted) == 1
    assert len(service.pool) == 0


def test_duplicate_arrival_logged_and_dropped(service, caplog):
    service.submit_arrival(Player("A", 50, "NA"))
    service.submit_arrival(Player("A", 99, "EU"))

    with caplog.at_level(logging.WARNING):
        service.step()

    assert len(service.pool) == 1
    assert service.pool.players()[0].skill_level == 50
    assert "already waiting" in caplog.text


def test_sink_error_does_not_stop_loop(pool, clock, caplog):
    calls = []

    def failing_sink(match):
        calls.append(match)
        raise RuntimeError("session setup down")

    service = MatchmakingService(pool, failing_sink, clock=clock, continue_as_new_after=0)
    for pid, skill in (("A", 1), ("B", 2), ("C", 50), ("D", 51)):
        service.submit_arrival(Player(pid, skill, "NA"))

    with caplog.at_level(logging.ERROR):
        service.step()

    assert len(calls) == 2
    assert len(service.pool) == 0
    assert "session setup down" in caplog.text


def test_continue_as_new_carries_state(pool, clock, emitted):
    checkpoints = []
    service = MatchmakingService(
        pool, emitted.append, clock=clock, continue_as_new_after=2, on_checkpoint=checkpoints.append
    )
    service.submit_arrival(Player("A", 50, "NA"))
    service.step()
    clock.advance(5)
    service.submit_arrival(Player("C", 90, "EU"))
    service.step()

    assert service.generation == 1
    assert service.iterations == 0
    assert len(checkpoints) == 1
    assert [p.id for p in checkpoints[0].players] == ["A", "C"]
    assert service.pool is not pool
    # joined_at survives the restart
    assert service.pool.wait_time("A", clock.now()) == 5.0

    clock.advance(26)  # A waited 31s, C 26s
    assert service.step() == []
    clock.advance(4)
    assert [m.player_ids for m in service.step()] == [("A", "C")]


def test_explicit_continue_as_new_returns_snapshot(service):
    service.submit_arrival(Player("A", 50, "NA"))
    service.step()

    snapshot = service.continue_as_new()

    assert [p.id for p in snapshot.players] == ["A"]
    assert service.generation == 1


def test_negative_retry_delay_rejected(pool):
    with pytest.raises(ValueError):
        MatchmakingService(pool, lambda m: None, retry_delay=-1)


def test_zero_retry_delay_rejected(pool):
    # step(0) polls without blocking, so the loop would spin
    with pytest.raises(ValueError, match="retry_delay"):
        MatchmakingService(pool, lambda m: None, retry_delay=0)


def test_negative_continue_as_new_rejected(pool):
    with pytest.raises(ValueError, match="continue_as_new_after"):
        MatchmakingService(pool, lambda m: None, continue_as_new_after=-1)


def test_background_thread_matches_and_stops(pool):
    matched = threading.Event()
    emitted = []

    def sink(match):
        emitted.append(match)
        matched.set()

    service = MatchmakingService(pool, sink, retry_delay=0.01, continue_as_new_after=0)
    with service:
        assert service.is_running()
        service.submit_arrival(Player("A", 50, "NA"))
        service.submit_arrival(Player("B", 52, "NA"))
        assert matched.wait(timeout=5.0)

    assert not service.is_running()
    assert emitted[0].player_ids == ("A", "B")


def test_commands_queued_before_stop_are_applied(pool, clock):
    emitted = []
    service = MatchmakingService(pool, emitted.append, clock=clock, retry_delay=0.01, continue_as_new_after=0)
    stop_event = threading.Event()
    stop_event.set()
    service.submit_arrival(Player("A", 50, "NA"))
    service.submit_arrival(Player("B", 52, "NA"))

    service.run(stop_event)

    assert [m.player_ids for m in emitted] == [("A", "B")]


def test_build_service_from_config(test_config, clock):
    test_config['matching']['skill_tolerance'] = 3
    test_config['driver']['continue_as_new_after'] = 7

    service = build_service(test_config, lambda m: None, clock=clock)

    assert service.pool.rules.skill_tolerance == 3
    assert service.retry_delay == 0.01
    assert service.continue_as_new_after == 7
    assert service.clock is clock
    assert isinstance(service.pool, MatchmakingPool)


@pytest.mark.parametrize('key,value', [
    ('retry_delay', 0),
    ('continue_as_new_after', -1),
    ('simulation_tick', 0),
])
def test_build_service_rejects_bad_driver_config(test_config, key, value):
    test_config['driver'][key] = value

    with pytest.raises(ValueError, match=key):
        build_service(test_config, lambda m: None)


def test_build_service_rejects_bad_matching_config(test_config):
    test_config['matching']['skill_tolerance'] = -1

    with pytest.raises(ValueError, match="skill_tolerance"):
        build_service(test_config, lambda m: None)


class _StuckThread:
    """Thread stand-in whose join() times out without the thread exiting."""

    def __init__(self):
        self.join_timeouts = []

    def join(self, timeout=None):
        self.join_timeouts.append(timeout)

    def is_alive(self):
        return True


def test_stop_keeps_handle_when_thread_still_alive(service, caplog):
    stuck = _StuckThread()
    service._thread = stuck

    with caplog.at_level(logging.WARNING, logger="mmp.services.matchmaking_service"):
        service.stop(timeout=0.01)

    assert stuck.join_timeouts == [0.01]
    assert service.is_running()
    assert "did not stop" in caplog.text

    # start() must not spawn a second loop while the first is alive
    service.start()
    assert service._thread is stuck
