"""Height-grid maps and voxel terrain.

A map is a square grid of integer heights. Each cell `(x, z)` with height
`h > 0` becomes a column of `h` unit voxels stacked at `y = 0..h-1`.
"""
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, NamedTuple, Optional, Tuple

import numpy as np
from pydantic import ValidationError

from .document import MapIn, Source, map_data_from_doc, map_data_to_doc, validate_document
from .errors import MapLoadError
from .model import MapData
from .rng import DRNG

logger = logging.getLogger(__name__)

DEFAULT_MAP_WIDTH = 10
DEFAULT_CUBE_SIZE = 1.0

class Voxel(NamedTuple):
    x: int
    y: int
    z: int

@dataclass
class MapGrid:
    name: str
    description: str
    cube_size: float
    heights: np.ndarray  # shape (width, width), indexed [x, z]

    @property
    def width(self) -> int:
        return int(self.heights.shape[0])

    def height_at(self, x: int, z: int) -> int:
        return int(self.heights[x, z])

@dataclass
class VoxelColumn:
    x: int
    z: int
    height: int
    cube_size: float = DEFAULT_CUBE_SIZE

    @property
    def voxels(self) -> List[Voxel]:
        return [Voxel(self.x, y, self.z) for y in range(self.height)]

    def world_position(self, y: int) -> Tuple[float, float, float]:
        """World-space centre of the voxel at level `y`."""
        return (self.x * self.cube_size, y * self.cube_size, self.z * self.cube_size)

def grid_from_map_data(data: MapData) -> MapGrid:
    """Build a grid, zero-filling rows and columns the data does not cover."""
    width = data.map_width
    if width <= 0:
        logger.warning(f"[MapGen] Invalid map width {width}, using default {DEFAULT_MAP_WIDTH}")
        width = DEFAULT_MAP_WIDTH
    cube_size = data.cube_size
    if cube_size <= 0:
        logger.warning(f"[MapGen] Invalid cube size {cube_size}, using default {DEFAULT_CUBE_SIZE}")
        cube_size = DEFAULT_CUBE_SIZE

    heights = np.zeros((width, width), dtype=np.int64)
    if len(data.rows) < width:
        logger.warning(f"[MapGen] Map has {len(data.rows)} rows, fewer than width {width}; filling with 0")
    for x, row in enumerate(data.rows[:width]):
        if len(row) < width:
            logger.warning(f"[MapGen] Row {x} has {len(row)} cells, filling the rest with 0")
        n = min(width, len(row))
        heights[x, :n] = row[:n]

    return MapGrid(name=data.map_name, description=data.map_description,
                   cube_size=float(cube_size), heights=heights)

def to_map_data(grid: MapGrid) -> MapData:
    return MapData(
        map_name=grid.name,
        map_description=grid.description,
        map_width=grid.width,
        cube_size=grid.cube_size,
        rows=[[int(h) for h in grid.heights[x]] for x in range(grid.width)],
    )

def load_map(source: Source) -> MapGrid:
    """Load a map document from a path, JSON text/bytes or a decoded mapping."""
    try:
        doc: MapIn = validate_document(MapIn, source)
    except ValidationError as e:
        raise MapLoadError(f"Invalid map document: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise MapLoadError(f"Cannot read map document: {e}") from e

    if doc.rows is None:
        raise MapLoadError("Map document has no rows")

    grid = grid_from_map_data(map_data_from_doc(doc))
    logger.info(f"[MapGen] Loaded map '{grid.name}' ({grid.width}x{grid.width}): {grid.description}")
    return grid

def save_map(grid: MapGrid, destination) -> Path:
    """Write the grid as a map document. Parent directories are created."""
    path = Path(destination)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(map_data_to_doc(to_map_data(grid)), indent=4), encoding="utf-8")
    logger.info(f"[MapGen] Saved map '{grid.name}' to {path}")
    return path

def random_grid(width: int = DEFAULT_MAP_WIDTH, seed: int = 0, cube_size: float = DEFAULT_CUBE_SIZE,
                name: str = "Random map") -> MapGrid:
    """Random heights in [0, 4), reproducible for a given seed."""
    if width <= 0:
        width = DEFAULT_MAP_WIDTH
    heights = DRNG(seed).heights(width)
    return MapGrid(name=name, description=f"Random {width}x{width} map (seed {seed})",
                   cube_size=cube_size, heights=heights)

def generate_voxels(grid: MapGrid) -> List[VoxelColumn]:
    """One column per cell with positive height, in row-major (x, z) order."""
    columns: List[VoxelColumn] = []
    for x in range(grid.width):
        for z in range(grid.width):
            h = grid.height_at(x, z)
            if h <= 0:
                continue
            columns.append(VoxelColumn(x=x, z=z, height=h, cube_size=grid.cube_size))
    return columns

@dataclass
class MapGenerator:
    """Holds the voxel columns of the last generated grid."""
    grid: Optional[MapGrid] = None
    columns: List[VoxelColumn] = field(default_factory=list)

    def generate(self, grid: Optional[MapGrid] = None) -> List[VoxelColumn]:
        """Replace any previous terrain with the voxels of `grid`."""
        if grid is not None:
            self.grid = grid
        if self.grid is None:
            raise ValueError("No map grid to generate from")
        self.clear()
        self.columns = generate_voxels(self.grid)
        logger.info(f"[MapGen] Generated {self.voxel_count} voxels in {len(self.columns)} columns")
        return self.columns

    def clear(self) -> None:
        self.columns = []

    def voxels(self) -> Iterator[Voxel]:
        for col in self.columns:
            yield from col.voxels

    @property
    def voxel_count(self) -> int:
        return sum(col.height for col in self.columns)
