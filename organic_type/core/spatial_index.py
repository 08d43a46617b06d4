# ═══════════════════════════════════════════════════════════════════════════════
# PART 2: SPATIAL INDEX
# Design: G1 (Layout Geometry) | Implementation: I2 (Numerics)
# ═══════════════════════════════════════════════════════════════════════════════

"""
G1: "Growth asks 'who is near me' once per node per tick. A uniform grid
answers that by scanning only the cells the query square touches."

I2: "Queries repeat a lot inside one tick, so results are cached in a small
LRU keyed by the rounded query. Any insert or remove drops the whole cache:
correct answers first, reuse second."
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Set, Tuple

from organic_type.core.geometry import Point, distance, is_number, is_point, round_half_up

logger = logging.getLogger(__name__)

CellKey = Tuple[int, int]
CacheKey = Tuple[int, int, int]


@dataclass
class SpatialIndexConfig:
    """Configuration for the uniform grid index."""
    cell_size: float = 50.0
    max_cache_size: int = 100

    # Expanding-ring nearest search
    nearest_search_radii: Tuple[float, ...] = (50.0, 100.0, 200.0, 500.0)
    nearest_search_cap: float = 1000.0


def coerce_dimension(value: Any, default: float, minimum: float = 1.0) -> float:
    """
    Coerce a geometry argument to a safe positive number.

    Non-numeric, NaN, infinite, zero or negative values fall back to
    default; the result is never below minimum.
    """
    try:
        number = float(value)
    except (TypeError, ValueError):
        number = math.nan

    if not math.isfinite(number) or number <= 0:
        if value is not None:
            logger.warning(f"Invalid dimension {value!r}, using default {default}")
        number = default
    return max(minimum, number)


class SpatialIndexer(ABC):
    """Capability interface for proximity lookups over positioned items."""

    @property
    @abstractmethod
    def item_count(self) -> int:
        """Number of indexed items."""

    @abstractmethod
    def insert(self, item: Any) -> bool:
        """Index item (upsert by id). False on invalid input."""

    @abstractmethod
    def query(self, position: Any, radius: float) -> List[Any]:
        """All items within radius of position."""

    @abstractmethod
    def remove(self, item_id: Any) -> bool:
        """Drop every item with this id. True if anything was removed."""

    @abstractmethod
    def update(self, item: Any) -> bool:
        """Remove by id, then insert."""

    @abstractmethod
    def find_nearest(self, position: Any, max_distance: float = math.inf) -> Optional[Any]:
        """Heuristic nearest item, or None."""

    @abstractmethod
    def get_items_in_bounds(self, min_x: float, min_y: float, max_x: float, max_y: float) -> List[Any]:
        """Items inside the axis-aligned rectangle (inclusive)."""

    @abstractmethod
    def clear(self) -> None:
        """Drop everything."""

    @abstractmethod
    def cleanup(self) -> None:
        """Housekeeping: drop empty cells, shrink the cache."""

    @abstractmethod
    def get_stats(self) -> dict:
        """Occupancy and memory statistics."""


class SpatialIndex(SpatialIndexer):
    """
    Uniform grid over a bounded canvas with an LRU query cache.

    Items are any objects carrying `position` (with numeric `x`, `y`) and
    optionally `id`. Positions outside the canvas are clamped into the
    border cells, so every item lives in exactly one cell.

    Invariants:
    - item_count == sum of cell list lengths
    - a cell exists only while it holds at least one item
    - len(query cache) <= max_cache_size
    """

    def __init__(
        self,
        width: Any = 800,
        height: Any = 600,
        cell_size: Any = None,
        config: Optional[SpatialIndexConfig] = None,
    ) -> None:
        self.config = config or SpatialIndexConfig()
        if cell_size is None:
            cell_size = self.config.cell_size

        self.width = coerce_dimension(width, 800.0)
        self.height = coerce_dimension(height, 600.0)
        self.cell_size = coerce_dimension(cell_size, 50.0)
        self.max_cache_size = max(1, int(self.config.max_cache_size))

        self.grid_width = int(math.ceil(self.width / self.cell_size))
        self.grid_height = int(math.ceil(self.height / self.cell_size))

        self.grid: Dict[CellKey, List[Any]] = {}
        self._item_count: int = 0

        # id -> cells holding an item with that id
        self._id_cells: Dict[Any, Set[CellKey]] = {}

        # LRU: oldest first
        self.query_cache: "OrderedDict[CacheKey, List[Any]]" = OrderedDict()

    # ── Properties ──────────────────────────────────────────────────────────

    @property
    def item_count(self) -> int:
        return self._item_count

    @property
    def cell_count(self) -> int:
        return len(self.grid)

    # ── Grid ────────────────────────────────────────────────────────────────

    def grid_key(self, x: float, y: float) -> CellKey:
        """Cell containing (x, y), clamped to the grid bounds."""
        if not is_number(x) or not is_number(y):
            logger.warning(f"Invalid coordinates for grid key: ({x!r}, {y!r})")
            return (0, 0)

        gx = int(math.floor(x / self.cell_size))
        gy = int(math.floor(y / self.cell_size))
        return (
            max(0, min(self.grid_width - 1, gx)),
            max(0, min(self.grid_height - 1, gy)),
        )

    # ── Mutation ────────────────────────────────────────────────────────────

    def insert(self, item: Any) -> bool:
        position = getattr(item, "position", None)
        if item is None or not is_point(position):
            logger.warning(f"Invalid item for spatial index: {item!r}")
            return False

        item_id = getattr(item, "id", None)
        if item_id is not None and item_id in self._id_cells:
            self.remove(item_id)

        key = self.grid_key(position.x, position.y)
        self.grid.setdefault(key, []).append(item)
        self._item_count += 1

        if item_id is not None:
            self._id_cells.setdefault(item_id, set()).add(key)

        self.clear_query_cache()
        return True

    def remove(self, item_id: Any) -> bool:
        if item_id is None:
            return False

        cells = self._id_cells.pop(item_id, None)
        if not cells:
            return False

        removed = 0
        for key in cells:
            items = self.grid.get(key)
            if not items:
                continue
            kept = [it for it in items if getattr(it, "id", None) != item_id]
            removed += len(items) - len(kept)
            if kept:
                self.grid[key] = kept
            else:
                del self.grid[key]

        self._item_count = max(0, self._item_count - removed)
        if removed:
            self.clear_query_cache()
        return removed > 0

    def update(self, item: Any) -> bool:
        item_id = getattr(item, "id", None)
        if item is None or item_id is None:
            return False

        self.remove(item_id)
        return self.insert(item)

    def clear(self) -> None:
        self.grid.clear()
        self._id_cells.clear()
        self._item_count = 0
        self.clear_query_cache()

    # ── Queries ─────────────────────────────────────────────────────────────

    def query(self, position: Any, radius: float) -> List[Any]:
        """
        All items whose distance to position is <= radius.

        Results are cached per rounded (x, y, radius); a cached hit returns
        the same list object. Callers must not mutate it.
        """
        if not is_point(position):
            logger.warning(f"Invalid position for query: {position!r}")
            return []
        if not is_number(radius) or radius < 0:
            logger.warning(f"Invalid radius for query: {radius!r}")
            return []

        x, y = float(position.x), float(position.y)
        cache_key = (round_half_up(x), round_half_up(y), round_half_up(radius))

        cached = self.query_cache.get(cache_key)
        if cached is not None:
            self.query_cache.move_to_end(cache_key)
            return cached

        results = self._perform_query(x, y, float(radius))
        self._add_to_cache(cache_key, results)
        return results

    def find_item_by_id(self, item_id: Any) -> Optional[Any]:
        if item_id is None:
            return None
        for key in self._id_cells.get(item_id, ()):
            for item in self.grid.get(key, ()):
                if getattr(item, "id", None) == item_id:
                    return item
        return None

    def find_nearest(self, position: Any, max_distance: float = math.inf) -> Optional[Any]:
        """
        Expanding-ring nearest neighbour.

        Tries radii 50, 100, 200, 500 and finally the limit, each capped at
        min(max_distance, 1000), stopping at the first radius that yields a
        candidate. This is an early-exit heuristic: the winner is the
        closest item within that first productive ring.
        """
        if not is_point(position):
            logger.warning(f"Invalid position for nearest search: {position!r}")
            return None
        if not is_number(max_distance) and max_distance != math.inf:
            logger.warning(f"Invalid max distance for nearest search: {max_distance!r}")
            return None

        limit = min(max_distance, self.config.nearest_search_cap)
        if limit < 0:
            return None

        nearest = None
        best = limit
        for radius in (*self.config.nearest_search_radii, limit):
            for item in self.query(position, min(radius, limit)):
                d = distance(item.position, position)
                if d < best or (nearest is None and d <= best):
                    best = d
                    nearest = item

            if nearest is not None:
                break

        return nearest

    def get_items_in_bounds(self, min_x: float, min_y: float, max_x: float, max_y: float) -> List[Any]:
        if not all(is_number(v) for v in (min_x, min_y, max_x, max_y)):
            logger.warning("Invalid bounds parameters")
            return []

        lo_x, lo_y = self.grid_key(min_x, min_y)
        hi_x, hi_y = self.grid_key(max_x, max_y)

        results = []
        for gx in range(lo_x, hi_x + 1):
            for gy in range(lo_y, hi_y + 1):
                for item in self.grid.get((gx, gy), ()):
                    p = item.position
                    if min_x <= p.x <= max_x and min_y <= p.y <= max_y:
                        results.append(item)
        return results

    # ── Housekeeping ────────────────────────────────────────────────────────

    def clear_query_cache(self) -> None:
        self.query_cache.clear()

    def cleanup(self) -> None:
        """Drop empty cells and shrink the cache to its most recent half."""
        for key in [k for k, items in self.grid.items() if not items]:
            del self.grid[key]

        keep = self.max_cache_size // 2
        while len(self.query_cache) > keep:
            self.query_cache.popitem(last=False)

    def get_stats(self) -> dict:
        return {
            "item_count": self._item_count,
            "cell_count": len(self.grid),
            "grid_size": self.grid_width * self.grid_height,
            "cache_size": len(self.query_cache),
            "average_items_per_cell": (
                self._item_count / len(self.grid) if self.grid else 0.0
            ),
            "memory_usage": self.estimate_memory_usage(),
        }

    def estimate_memory_usage(self) -> dict:
        items = self._item_count * 200
        grid = len(self.grid) * 100
        cache = len(self.query_cache) * 50
        return {"items": items, "grid": grid, "cache": cache, "total": items + grid + cache}

    # ── Internal ────────────────────────────────────────────────────────────

    def _perform_query(self, x: float, y: float, radius: float) -> List[Any]:
        reach = int(math.ceil(radius / self.cell_size))
        cx = int(math.floor(x / self.cell_size))
        cy = int(math.floor(y / self.cell_size))

        # Clamp each end separately: out-of-canvas items live in border cells
        lo_x = max(0, min(self.grid_width - 1, cx - reach))
        hi_x = max(0, min(self.grid_width - 1, cx + reach))
        lo_y = max(0, min(self.grid_height - 1, cy - reach))
        hi_y = max(0, min(self.grid_height - 1, cy + reach))

        centre = Point(x, y)
        results = []
        for gx in range(lo_x, hi_x + 1):
            for gy in range(lo_y, hi_y + 1):
                for item in self.grid.get((gx, gy), ()):
                    if distance(item.position, centre) <= radius:
                        results.append(item)
        return results

    def _add_to_cache(self, key: CacheKey, results: List[Any]) -> None:
        while len(self.query_cache) >= self.max_cache_size:
            self.query_cache.popitem(last=False)
        self.query_cache[key] = results


class NullSpatialIndex(SpatialIndexer):
    """No-op index: remembers nothing, every lookup is empty."""

    @property
    def item_count(self) -> int:
        return 0

    def insert(self, item: Any) -> bool:
        return False

    def query(self, position: Any, radius: float) -> List[Any]:
        return []

    def remove(self, item_id: Any) -> bool:
        return False

    def update(self, item: Any) -> bool:
        return False

    def find_nearest(self, position: Any, max_distance: float = math.inf) -> Optional[Any]:
        return None

    def get_items_in_bounds(self, min_x: float, min_y: float, max_x: float, max_y: float) -> List[Any]:
        return []

    def clear(self) -> None:
        pass

    def cleanup(self) -> None:
        pass

    def get_stats(self) -> dict:
        return {
            "item_count": 0,
            "cell_count": 0,
            "grid_size": 0,
            "cache_size": 0,
            "average_items_per_cell": 0.0,
            "memory_usage": {"items": 0, "grid": 0, "cache": 0, "total": 0},
        }
