"""Battle and map document schemas.

The on-disk documents use camelCase keys (`soldierType`, `gameRounds`,
`mapWidth`, ...). They are validated with pydantic and then converted to the
plain dataclasses in `engine.model`, which is all the engine ever sees.
"""
import logging
import os
from pathlib import Path
from typing import Annotated, Any, Dict, Iterable, List, Literal, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from .errors import MalformedDataError
from .model import BattleAction, GameData, GameRound, MapData, SoldierConfig, SoldierData, SoldierStats

logger = logging.getLogger(__name__)

Source = Union[str, bytes, os.PathLike, Mapping[str, Any]]


def _coerce_vec3(value: Any) -> Any:
    """Accept {"x","y","z"} objects as well as [x, y, z] lists."""
    if isinstance(value, Mapping):
        return (value.get("x", 0.0), value.get("y", 0.0), value.get("z", 0.0))
    return value


Vec3 = Annotated[Tuple[float, float, float], BeforeValidator(_coerce_vec3)]


class _Doc(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StatsIn(_Doc):
    health: int
    strength: int = 0
    mana: int = 0


class SoldierIn(_Doc):
    id: int = Field(alias="ID")
    soldier_type: str
    camp: Literal["Red", "Blue"]
    position: Vec3
    stats: StatsIn

    @field_validator("camp", mode="before")
    @classmethod
    def _normalize_camp(cls, v: Any) -> Any:
        return v.capitalize() if isinstance(v, str) else v


class SoldiersIn(_Doc):
    soldiers: List[SoldierIn]


class ActionIn(_Doc):
    action_type: str
    soldier_id: int
    path: Optional[List[Vec3]] = None
    remaining_movement: int = 0
    target_id: Optional[int] = None
    damage_dealt: int = 0
    new_stats: Optional[StatsIn] = None
    ability: Optional[str] = None
    target_position: Optional[Vec3] = None
    mana_cost: int = 0


class RoundIn(_Doc):
    round_number: int
    initial_state: Optional[SoldiersIn] = None
    actions: Optional[List[ActionIn]] = None


class MapRowIn(_Doc):
    row: Optional[List[int]] = None


class MapIn(_Doc):
    map_name: Optional[str] = None
    map_description: Optional[str] = None
    map_width: int = 0
    cube_size: float = 0.0
    rows: Optional[List[MapRowIn]] = None


class GameDataIn(_Doc):
    map_metadata: Optional[MapIn] = None
    soldiers_data: SoldiersIn
    game_rounds: Optional[List[RoundIn]] = None


def read_source(source: Source) -> Union[str, bytes, Mapping[str, Any]]:
    """Resolve a path to its text; leave text, bytes and mappings alone."""
    if isinstance(source, os.PathLike):
        return Path(source).read_text(encoding="utf-8")
    return source


def validate_document(model: type, source: Source) -> Any:
    """Validate `source` against a schema model. Raises ValidationError."""
    raw = read_source(source)
    if isinstance(raw, Mapping):
        return model.model_validate(raw)
    return model.model_validate_json(raw)


def _stats(s: StatsIn) -> SoldierStats:
    return SoldierStats(health=s.health, strength=s.strength, mana=s.mana)


def _soldier(s: SoldierIn) -> SoldierData:
    return SoldierData(id=s.id, soldier_type=s.soldier_type, camp=s.camp,
                       position=s.position, stats=_stats(s.stats))


def _action(a: ActionIn) -> BattleAction:
    return BattleAction(
        action_type=a.action_type,
        soldier_id=a.soldier_id,
        path=list(a.path or []),
        remaining_movement=a.remaining_movement,
        target_id=a.target_id,
        damage_dealt=a.damage_dealt,
        new_stats=_stats(a.new_stats) if a.new_stats else None,
        ability=a.ability,
        target_position=a.target_position,
        mana_cost=a.mana_cost,
    )


def map_data_from_doc(m: MapIn) -> MapData:
    return MapData(
        map_name=m.map_name if m.map_name is not None else "Untitled map",
        map_description=m.map_description if m.map_description is not None else "No description",
        map_width=m.map_width,
        cube_size=m.cube_size,
        rows=[list(r.row) if r.row is not None else [] for r in (m.rows or [])],
    )


def map_data_to_doc(data: MapData) -> Dict[str, Any]:
    return MapIn(
        map_name=data.map_name,
        map_description=data.map_description,
        map_width=data.map_width,
        cube_size=data.cube_size,
        rows=[MapRowIn(row=list(r)) for r in data.rows],
    ).model_dump(by_alias=True)


def _unique_soldiers(soldiers: Iterable[SoldierIn], where: str) -> List[SoldierData]:
    out: List[SoldierData] = []
    seen = set()
    for s in soldiers:
        if s.id in seen:
            raise MalformedDataError(f"Duplicate soldier ID {s.id} in {where}")
        seen.add(s.id)
        out.append(_soldier(s))
    return out


def parse_game_data(source: Source) -> GameData:
    """Parse a battle document into `GameData`.

    Raises MalformedDataError if the document is not valid JSON, misses
    required fields, repeats a soldier ID or declares a map without rows.
    """
    try:
        doc: GameDataIn = validate_document(GameDataIn, source)
    except ValidationError as e:
        raise MalformedDataError(f"Invalid battle document: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise MalformedDataError(f"Cannot read battle document: {e}") from e

    map_data = None
    if doc.map_metadata is not None:
        if not doc.map_metadata.rows:
            raise MalformedDataError("Map metadata declares no rows")
        map_data = map_data_from_doc(doc.map_metadata)

    soldiers = _unique_soldiers(doc.soldiers_data.soldiers, "soldiersData")
    rounds = []
    for r in doc.game_rounds or []:
        initial = None
        if r.initial_state is not None:
            initial = _unique_soldiers(r.initial_state.soldiers, f"round {r.round_number}")
        rounds.append(GameRound(round_number=r.round_number,
                                actions=[_action(a) for a in r.actions or []],
                                initial_state=initial))
    rounds.sort(key=lambda r: r.round_number)  # stable: ties keep document order

    logger.info(f"[Loader] Parsed battle: {len(soldiers)} soldiers, {len(rounds)} rounds")
    return GameData(map_data=map_data, soldiers=soldiers, rounds=rounds)


def build_catalog(configs: Iterable[SoldierConfig]) -> Dict[str, SoldierConfig]:
    """Index soldier configs by type. Later entries win on duplicate types."""
    return {c.type: c for c in configs}
