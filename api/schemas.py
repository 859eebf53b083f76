from typing import List, Optional, Tuple
from pydantic import BaseModel, Field

class AutoPlayRequest(BaseModel):
    """Auto-play toggle request schema."""
    interval_s: Optional[float] = Field(default=None, gt=0)

class RandomMapRequest(BaseModel):
    """Random map request schema."""
    width: int = Field(default=10, gt=0, le=256)
    seed: int = 0
    cube_size: float = Field(default=1.0, gt=0)

class StatsOut(BaseModel):
    health: int
    strength: int
    mana: int

class SoldierOut(BaseModel):
    id: int
    soldier_type: str
    camp: str
    position: Tuple[float, float, float]
    stats: StatsOut
    alive: bool

class StateResponse(BaseModel):
    """Battle state response schema."""
    battle_id: str
    round_index: int
    total_rounds: int
    can_step_forward: bool
    can_step_backward: bool
    auto_playing: bool
    soldiers: List[SoldierOut]

class StepResponse(BaseModel):
    advanced: bool
    round_index: int

class LoadResponse(BaseModel):
    battle_id: str
    total_rounds: int
    soldiers: int
    skipped: List[int]

class MapSummary(BaseModel):
    name: str
    description: str
    width: int
    cube_size: float
    columns: int
    voxels: int

class EventsResponse(BaseModel):
    """Events response schema."""
    next_offset: int
    events: list[dict]
