"""Shared fixtures for the replay tests."""
from pathlib import Path
from typing import List, Optional

import pytest

from engine.document import parse_game_data
from engine.model import BattleAction, GameData, GameRound, SoldierData, SoldierStats
from engine.presentation import RecordingListener

DATA_DIR = Path(__file__).resolve().parent.parent / "data"


def soldier(id: int, health: int = 10, camp: str = "Red", soldier_type: str = "Knight",
            position=(0.0, 0.0, 0.0)) -> SoldierData:
    return SoldierData(id=id, soldier_type=soldier_type, camp=camp, position=position,
                       stats=SoldierStats(health=health, strength=5, mana=3))


def attack(attacker: int, target: int, damage: int) -> BattleAction:
    return BattleAction(action_type="Attack", soldier_id=attacker, target_id=target, damage_dealt=damage)


def make_game(soldiers: List[SoldierData], rounds: List[List[BattleAction]],
              first_round: int = 1) -> GameData:
    return GameData(
        map_data=None,
        soldiers=soldiers,
        rounds=[GameRound(round_number=first_round + i, actions=acts) for i, acts in enumerate(rounds)],
    )


@pytest.fixture
def battle_path() -> Path:
    return DATA_DIR / "sample_battle.json"


@pytest.fixture
def map_path() -> Path:
    return DATA_DIR / "sample_map.json"


@pytest.fixture
def sample_game(battle_path: Path) -> GameData:
    return parse_game_data(battle_path)


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def duel_game() -> GameData:
    """Two soldiers, one round in which soldier 0 hits soldier 1 for 15."""
    return make_game([soldier(0), soldier(1, camp="Blue")], [[attack(0, 1, 15)]])
