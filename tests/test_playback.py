"""Test stepping and auto-play in the playback controller."""
import asyncio

import pytest

from conftest import attack, make_game, soldier
from engine.engine import ReplayEngine
from engine.presentation import RecordingListener
from runtime.config import MIN_ROUND_INTERVAL_S
from runtime.runner import PlaybackController


def make_controller(game, listener=None, interval=MIN_ROUND_INTERVAL_S) -> PlaybackController:
    return PlaybackController(ReplayEngine(game, listener=listener), round_interval_s=interval)


def five_rounds():
    return make_game([soldier(0, health=100), soldier(1, health=100)],
                     [[attack(0, 1, 1)] for _ in range(5)])


def test_duel_step_forward_then_back(duel_game):
    c = make_controller(duel_game)
    assert c.can_step_forward and not c.can_step_backward

    assert c.step_forward()
    assert c.round_index == 1
    assert c.snapshot().soldiers[1].stats.health == -5
    assert not c.snapshot().soldiers[1].alive
    assert not c.can_step_forward and c.can_step_backward

    assert c.step_backward()
    assert c.round_index == 0
    assert c.snapshot().soldiers[1].stats.health == 10
    assert c.snapshot().soldiers[1].alive


def test_step_forward_at_end_is_noop(duel_game):
    c = make_controller(duel_game)
    c.step_forward()
    before = {k: v.clone() for k, v in c.snapshot().soldiers.items()}
    assert not c.step_forward()
    assert c.round_index == 1
    assert c.snapshot().soldiers == before


def test_step_backward_at_start_is_noop(duel_game):
    c = make_controller(duel_game)
    assert not c.step_backward()
    assert c.round_index == 0


def test_step_backward_respawns_roster(duel_game, listener):
    c = make_controller(duel_game, listener=listener)
    c.step_forward()
    listener.calls.clear()
    c.step_backward()
    assert listener.calls == [("roster_cleared",), ("spawned", 0), ("spawned", 1)]


def test_events_are_logged(duel_game):
    c = make_controller(duel_game)
    c.step_forward()
    c.step_backward()
    kinds = [e.kind for e in c.events.since(0)[0]]
    assert kinds == ["Damage", "Defeated", "RoundProcessed", "RoundRestored"]
    assert len(c.events.of_kind("Defeated")) == 1


def test_skip_to_end():
    c = make_controller(five_rounds())
    assert c.skip_to_end()
    assert c.round_index == 5
    assert c.snapshot().soldiers[1].stats.health == 95
    assert not c.skip_to_end()


def test_round_interval_is_clamped():
    c = make_controller(five_rounds(), interval=0.0001)
    assert c.round_interval_s == MIN_ROUND_INTERVAL_S
    c.set_round_interval(10_000)
    assert c.round_interval_s == 60.0


@pytest.mark.asyncio
async def test_auto_play_runs_to_end_and_disables_itself(listener):
    c = make_controller(five_rounds(), listener=listener)
    assert await c.toggle_auto_play()
    assert c.is_auto_playing
    assert not c.can_step_forward and not c.can_step_backward

    await asyncio.wait_for(c.join(), timeout=5)
    assert c.round_index == 5
    assert not c.is_auto_playing
    assert c.can_step_backward
    assert [call[1] for call in listener.named("round_processed")] == [1, 2, 3, 4, 5]


@pytest.mark.asyncio
async def test_manual_steps_blocked_during_auto_play():
    c = make_controller(five_rounds(), interval=1.0)
    await c.toggle_auto_play()
    await asyncio.sleep(0)  # let the first round run
    assert c.round_index == 1
    assert not c.step_forward()
    assert not c.step_backward()
    assert c.round_index == 1
    await c.stop()


@pytest.mark.asyncio
async def test_toggle_off_stops_at_tick_boundary():
    c = make_controller(five_rounds(), interval=1.0)
    assert await c.toggle_auto_play()
    await asyncio.sleep(0)
    assert not await c.toggle_auto_play()
    reached = c.round_index
    await asyncio.sleep(0.05)
    assert c.round_index == reached == 1
    assert not c.is_auto_playing
    assert c.step_forward()
    assert c.round_index == 2


@pytest.mark.asyncio
async def test_toggle_at_end_does_not_start(duel_game):
    c = make_controller(duel_game)
    c.step_forward()
    assert not await c.toggle_auto_play()
    assert not c.is_auto_playing


@pytest.mark.asyncio
async def test_toggle_sets_interval():
    c = make_controller(five_rounds(), interval=1.0)
    await c.toggle_auto_play(interval_s=0.2)
    assert c.round_interval_s == 0.2
    await c.stop()


class FailingSpawnListener(RecordingListener):
    def on_soldier_spawned(self, soldier_id: int) -> None:
        raise RuntimeError("prefab missing")


def test_steps_survive_failing_listener(duel_game):
    c = make_controller(duel_game, listener=FailingSpawnListener())
    assert c.step_forward()
    assert c.step_backward()
    assert c.round_index == 0
    assert c.snapshot().soldiers[1].stats.health == 10
