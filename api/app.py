import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Dict
from fastapi import Body, FastAPI, HTTPException
from engine.document import parse_game_data
from engine.engine import ReplayEngine
from engine.errors import MalformedDataError
from engine.mapgen import MapGenerator, grid_from_map_data, load_map, random_grid
from runtime.config import configure_logging, load_settings
from runtime.runner import PlaybackController
from .schemas import (AutoPlayRequest, EventsResponse, LoadResponse, MapSummary, RandomMapRequest,
                      SoldierOut, StateResponse, StepResponse)

logger = logging.getLogger(__name__)

settings = load_settings()
controller: PlaybackController | None = None
generator = MapGenerator()

async def _install(engine: ReplayEngine) -> PlaybackController:
    """Replace the active battle, stopping any auto-play on the old one."""
    global controller
    if controller:
        await controller.stop()
    controller = PlaybackController(engine, round_interval_s=settings.round_interval_s)
    return controller

def _require_controller() -> PlaybackController:
    if not controller:
        raise HTTPException(400, "No battle loaded")
    return controller

def _map_summary() -> MapSummary:
    grid = generator.grid
    return MapSummary(name=grid.name, description=grid.description, width=grid.width,
                      cube_size=grid.cube_size, columns=len(generator.columns),
                      voxels=generator.voxel_count)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load the configured battle and map, if any."""
    configure_logging(settings.log_level)
    if settings.map_path:
        try:
            generator.generate(load_map(Path(settings.map_path)))
        except MalformedDataError as e:
            logger.error(f"[API] Could not load map {settings.map_path}: {e}")
    if settings.game_data_path:
        try:
            game = parse_game_data(Path(settings.game_data_path))
            await _install(ReplayEngine(game))
            if game.map_data and generator.grid is None:
                generator.generate(grid_from_map_data(game.map_data))
        except MalformedDataError as e:
            logger.error(f"[API] Could not load battle {settings.game_data_path}: {e}")
    yield
    if controller:
        await controller.stop()

app = FastAPI(title="Battle Replay API", lifespan=lifespan)

@app.get("/")
async def root():
    """API root endpoint."""
    return {
        "message": "Battle Replay API",
        "docs": "/docs",
        "version": "1.0"
    }

@app.post("/battle/load", response_model=LoadResponse)
async def load_battle(document: Dict[str, Any] = Body(...)):
    """Load a battle document and rewind to its initial state."""
    try:
        game = parse_game_data(document)
    except MalformedDataError as e:
        raise HTTPException(422, str(e))
    engine = ReplayEngine(game)
    await _install(engine)
    if game.map_data:
        generator.generate(grid_from_map_data(game.map_data))
    logger.info(f"[API] Loaded battle with {len(engine.state.soldiers)} soldiers, {engine.total_rounds} rounds")
    return LoadResponse(battle_id=engine.state.battle_id, total_rounds=engine.total_rounds,
                        soldiers=len(engine.state.soldiers), skipped=[e.soldier_id for e in engine.skipped])

@app.get("/battle/state", response_model=StateResponse)
async def get_state():
    """Get current battle state snapshot."""
    c = _require_controller()
    s = c.snapshot()
    return StateResponse(
        battle_id=s.battle_id,
        round_index=c.round_index,
        total_rounds=c.total_rounds,
        can_step_forward=c.can_step_forward,
        can_step_backward=c.can_step_backward,
        auto_playing=c.is_auto_playing,
        soldiers=[SoldierOut(id=u.id, soldier_type=u.soldier_type, camp=u.camp, position=u.position,
                             stats={"health": u.stats.health, "strength": u.stats.strength,
                                    "mana": u.stats.mana},
                             alive=u.alive)
                  for u in s.soldiers.values()],
    )

@app.post("/battle/forward", response_model=StepResponse)
async def step_forward():
    """Advance one round."""
    c = _require_controller()
    advanced = c.step_forward()
    return StepResponse(advanced=advanced, round_index=c.round_index)

@app.post("/battle/backward", response_model=StepResponse)
async def step_backward():
    """Rewind one round."""
    c = _require_controller()
    advanced = c.step_backward()
    return StepResponse(advanced=advanced, round_index=c.round_index)

@app.post("/battle/end", response_model=StepResponse)
async def skip_to_end():
    """Process every remaining round."""
    c = _require_controller()
    advanced = c.skip_to_end()
    return StepResponse(advanced=advanced, round_index=c.round_index)

@app.post("/battle/autoplay")
async def toggle_auto_play(req: AutoPlayRequest | None = None):
    """Toggle timed auto-play."""
    c = _require_controller()
    playing = await c.toggle_auto_play(req.interval_s if req else None)
    return {"auto_playing": playing, "interval_s": c.round_interval_s}

@app.get("/battle/events")
async def get_events(since: int = 0, limit: int = 500, round: int | None = None):
    """Get events since offset, optionally for a single round."""
    c = _require_controller()
    evts, next_offset = c.events.since(since, limit, round=round)
    return EventsResponse(
        next_offset=next_offset,
        events=[{"kind": e.kind, "round": e.round, "data": e.data} for e in evts]
    )

@app.post("/map/load", response_model=MapSummary)
async def load_map_document(document: Dict[str, Any] = Body(...)):
    """Load a map document and generate its voxels."""
    try:
        grid = load_map(document)
    except MalformedDataError as e:
        raise HTTPException(422, str(e))
    generator.generate(grid)
    return _map_summary()

@app.post("/map/random", response_model=MapSummary)
async def random_map(req: RandomMapRequest):
    """Generate a random map."""
    generator.generate(random_grid(req.width, seed=req.seed, cube_size=req.cube_size))
    return _map_summary()

@app.get("/map/voxels")
async def get_voxels():
    """Voxels of the last generated map, as [x, y, z] triples."""
    if generator.grid is None:
        raise HTTPException(404, "No map generated")
    return {"cube_size": generator.grid.cube_size,
            "voxels": [list(v) for v in generator.voxels()]}
