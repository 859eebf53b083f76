from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Tuple

Camp = Literal["Red", "Blue"]
Position = Tuple[float, float, float]  # (x, y, z) world units

ACTION_MOVEMENT = "movement"
ACTION_ATTACK = "attack"
ACTION_ABILITY = "ability"

@dataclass
class SoldierStats:
    health: int
    strength: int = 0
    mana: int = 0

    def clone(self) -> "SoldierStats":
        return SoldierStats(self.health, self.strength, self.mana)

@dataclass
class SoldierData:
    """A soldier on the roster. Identity is `id`, stable across rounds."""
    id: int
    soldier_type: str  # Key into the soldier config catalog
    camp: Camp
    position: Position
    stats: SoldierStats
    alive: bool = True

    @property
    def defeated(self) -> bool:
        return self.stats.health <= 0

    def clone(self) -> "SoldierData":
        """Structural copy sharing no mutable state with the original."""
        return SoldierData(
            id=self.id,
            soldier_type=self.soldier_type,
            camp=self.camp,
            position=tuple(self.position),
            stats=self.stats.clone(),
            alive=self.alive,
        )

    def status_text(self) -> str:
        return f"HP: {self.stats.health}\nSTR: {self.stats.strength}\nMANA: {self.stats.mana}"

# Soldiers keyed by id, in roster order. Never indexed by position.
Roster = Dict[int, SoldierData]

def clone_roster(roster: Roster) -> Roster:
    return {sid: s.clone() for sid, s in roster.items()}

@dataclass(frozen=True)
class SoldierConfig:
    """Static catalog entry. `prefab` is an opaque handle owned by presentation."""
    type: str
    prefab: Any = None

@dataclass
class BattleAction:
    """Envelope shared by all action kinds plus the per-kind payload.

    Movement uses `path` and `remaining_movement`; attack uses `target_id`,
    `damage_dealt` and `new_stats`; ability uses `ability`, `target_position`
    and `mana_cost`. Fields of other kinds are left at their defaults.
    """
    action_type: str
    soldier_id: int
    # Movement
    path: List[Position] = field(default_factory=list)
    remaining_movement: int = 0
    # Attack
    target_id: Optional[int] = None
    damage_dealt: int = 0
    new_stats: Optional[SoldierStats] = None  # Parsed but never applied
    # Ability
    ability: Optional[str] = None
    target_position: Optional[Position] = None
    mana_cost: int = 0

    @property
    def kind(self) -> str:
        return self.action_type.lower()

@dataclass
class GameRound:
    round_number: int
    actions: List[BattleAction] = field(default_factory=list)
    initial_state: Optional[List[SoldierData]] = None

@dataclass
class MapData:
    map_name: str
    map_description: str
    map_width: int
    cube_size: float
    rows: List[List[int]] = field(default_factory=list)

@dataclass
class GameData:
    map_data: Optional[MapData]
    soldiers: List[SoldierData]
    rounds: List[GameRound] = field(default_factory=list)

@dataclass
class Event:
    kind: str
    round: int
    data: Dict

@dataclass
class BattleState:
    round_index: int = 0
    soldiers: Roster = field(default_factory=dict)
    battle_id: str = "local"

    def alive_ids(self) -> List[int]:
        return [sid for sid, s in self.soldiers.items() if s.alive]
