"""Test battle document parsing."""
import json

import pytest

from engine.document import build_catalog, parse_game_data
from engine.errors import MalformedDataError
from engine.model import SoldierConfig


def minimal_doc(**overrides) -> dict:
    doc = {
        "soldiersData": {"soldiers": [
            {"ID": 0, "soldierType": "Knight", "camp": "Red",
             "position": {"x": 1, "y": 2, "z": 3}, "stats": {"health": 10, "strength": 4, "mana": 1}},
        ]},
        "gameRounds": [],
    }
    doc.update(overrides)
    return doc


def test_parse_sample_file(sample_game):
    """The bundled sample parses into typed records."""
    assert len(sample_game.soldiers) == 4
    assert [r.round_number for r in sample_game.rounds] == [1, 2, 3]
    assert sample_game.map_data.map_width == 4
    assert sample_game.map_data.rows[2] == [1, 2, 3, 1]

    knight = sample_game.soldiers[0]
    assert knight.id == 0
    assert knight.soldier_type == "Knight"
    assert knight.camp == "Red"
    assert knight.position == (0.0, 1.0, 0.0)
    assert knight.stats.health == 30
    assert knight.alive
    assert knight.status_text() == "HP: 30\nSTR: 8\nMANA: 0"


def test_action_payloads(sample_game):
    move, ability = sample_game.rounds[0].actions
    assert move.kind == "movement"
    assert move.path[-1] == (1.0, 1.0, 2.0)
    assert move.remaining_movement == 1
    assert ability.kind == "ability"
    assert ability.ability == "Fireball"
    assert ability.target_position == (1.0, 1.0, 2.0)
    assert ability.mana_cost == 5

    hit = sample_game.rounds[1].actions[0]
    assert hit.kind == "attack"
    assert (hit.target_id, hit.damage_dealt) == (0, 12)
    assert hit.new_stats.health == 18


def test_accepts_text_and_list_positions():
    doc = minimal_doc()
    doc["soldiersData"]["soldiers"][0]["position"] = [4, 5, 6]
    game = parse_game_data(json.dumps(doc))
    assert game.soldiers[0].position == (4.0, 5.0, 6.0)
    assert game.map_data is None


def test_rounds_are_ordered_by_number():
    doc = minimal_doc(gameRounds=[
        {"roundNumber": 2, "actions": []},
        {"roundNumber": 1, "actions": None},
    ])
    game = parse_game_data(doc)
    assert [r.round_number for r in game.rounds] == [1, 2]
    assert game.rounds[0].actions == []


def test_invalid_json_is_malformed():
    with pytest.raises(MalformedDataError):
        parse_game_data("{not json")


def test_missing_soldiers_is_malformed():
    with pytest.raises(MalformedDataError):
        parse_game_data({"gameRounds": []})


def test_missing_health_is_malformed():
    doc = minimal_doc()
    del doc["soldiersData"]["soldiers"][0]["stats"]["health"]
    with pytest.raises(MalformedDataError):
        parse_game_data(doc)


def test_map_without_rows_is_malformed():
    doc = minimal_doc(mapMetadata={"mapName": "x", "mapWidth": 2, "cubeSize": 1.0, "rows": None})
    with pytest.raises(MalformedDataError):
        parse_game_data(doc)
    doc["mapMetadata"]["rows"] = []
    with pytest.raises(MalformedDataError):
        parse_game_data(doc)


def test_duplicate_ids_are_malformed():
    doc = minimal_doc()
    doc["soldiersData"]["soldiers"].append(dict(doc["soldiersData"]["soldiers"][0]))
    with pytest.raises(MalformedDataError):
        parse_game_data(doc)


def test_missing_file_is_malformed(tmp_path):
    with pytest.raises(MalformedDataError):
        parse_game_data(tmp_path / "nope.json")


def test_build_catalog_keys_by_type():
    catalog = build_catalog([SoldierConfig("Knight", "knight.prefab"), SoldierConfig("Mage")])
    assert set(catalog) == {"Knight", "Mage"}
    assert catalog["Knight"].prefab == "knight.prefab"
