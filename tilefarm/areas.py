"""Area unlock policy: adjacency, pricing and consistency rules.

The unlocked region always forms one 4-connected island grown outward from
the origin area. An area can only be bought when it touches (N/S/E/W, never
diagonally) an already unlocked area, so purchases can never create an
isolated pocket.

The policy is stateless with respect to the world: it reads and mutates the
``SpatialStore`` it is given and keeps no copies of area data.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Set

from .results import ActionResult, FailureReason
from .schemas import AreaData, Coord
from .world.coords import ORIGIN, manhattan_distance, orthogonal_neighbors, tile_area
from .world.store import SpatialStore


class AreaPricing(ABC):
    """Cost curve for purchasing areas.

    Implementations must return 0 for the origin and be non-decreasing along
    any path that moves away from the origin.
    """

    @abstractmethod
    def cost(self, coord: Coord) -> int:
        ...


@dataclass(frozen=True)
class DistancePricing(AreaPricing):
    """``base + per_distance * manhattan(origin, coord)``; free at the origin."""

    base_cost: int = 200
    per_distance: int = 100

    def cost(self, coord: Coord) -> int:
        distance = manhattan_distance(coord, ORIGIN)
        if distance == 0:
            return 0
        return self.base_cost + distance * self.per_distance


@dataclass(frozen=True)
class PurchasableArea:
    x: int
    y: int
    cost: int

    @property
    def coord(self) -> Coord:
        return (self.x, self.y)


@dataclass
class ConsistencyReport:
    """Outcome of ``validate_consistency``. Errors make the map invalid."""

    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class AreaStats:
    total_areas: int
    unlocked_areas: int
    locked_areas: int
    purchasable_areas: int
    total_cost_to_purchase_all: int


class AreaUnlockPolicy:
    """Rules governing which areas may be purchased and at what cost."""

    def __init__(
        self,
        store: SpatialStore,
        pricing: Optional[AreaPricing] = None,
        area_size: int = 12,
    ):
        if area_size <= 0:
            raise ValueError("area_size must be >= 1")
        self.store = store
        self.pricing = pricing or DistancePricing()
        self.area_size = area_size

    # -- queries -------------------------------------------------------------

    def is_unlocked(self, coord: Coord) -> bool:
        area = self.store.get_area(*coord)
        return area is not None and area.unlocked

    def purchase_cost(self, coord: Coord) -> int:
        return self.pricing.cost(coord)

    def is_adjacent_to_unlocked(self, coord: Coord) -> bool:
        return any(self.is_unlocked(n) for n in orthogonal_neighbors(*coord))

    def can_purchase(self, coord: Coord) -> bool:
        """Locked and orthogonally adjacent to at least one unlocked area."""
        return not self.is_unlocked(coord) and self.is_adjacent_to_unlocked(coord)

    def tile_area(self, tile_x: int, tile_y: int) -> Coord:
        return tile_area(tile_x, tile_y, self.area_size)

    def is_tile_unlocked(self, tile_x: int, tile_y: int) -> bool:
        return self.is_unlocked(self.tile_area(tile_x, tile_y))

    # -- mutation ------------------------------------------------------------

    def purchase(self, coord: Coord, wallet_balance: int) -> ActionResult:
        """Unlock ``coord`` if the rules and the balance allow it.

        Returns the cost to debit in ``ActionResult.cost``. The caller owns the
        ledger and must call ``revert_purchase`` if the debit is not confirmed.
        """
        x, y = coord
        if self.is_unlocked(coord):
            return ActionResult.fail(
                FailureReason.ALREADY_UNLOCKED, f"Area ({x}, {y}) is already unlocked"
            )
        if not self.is_adjacent_to_unlocked(coord):
            return ActionResult.fail(
                FailureReason.NOT_ADJACENT,
                f"Area ({x}, {y}) is not adjacent to any unlocked area",
            )

        cost = self.purchase_cost(coord)
        if wallet_balance < cost:
            return ActionResult.fail(
                FailureReason.INSUFFICIENT_FUNDS,
                f"Not enough coins! Need {cost} coins, but only have {wallet_balance}",
                cost=cost,
            )

        self.store.set_area(AreaData(x=x, y=y, unlocked=True))
        return ActionResult.ok(f"Area ({x}, {y}) unlocked for {cost} coins!", cost=cost)

    def revert_purchase(self, coord: Coord) -> None:
        """Relock an area whose payment failed. The origin is never relocked."""
        if coord == ORIGIN:
            return
        area = self.store.get_area(*coord)
        if area is not None:
            area.unlocked = False

    # -- reports -------------------------------------------------------------

    def unlocked_areas(self, area_map: Optional[Mapping[Coord, AreaData]] = None) -> List[AreaData]:
        areas = self.store.areas if area_map is None else area_map
        return [area for area in areas.values() if area.unlocked]

    def list_purchasable(
        self, area_map: Optional[Mapping[Coord, AreaData]] = None
    ) -> List[PurchasableArea]:
        """The frontier: locked coordinates adjacent to the unlocked region."""
        areas = self.store.areas if area_map is None else area_map
        unlocked: Set[Coord] = {area.coord for area in areas.values() if area.unlocked}

        frontier: Set[Coord] = set()
        for x, y in unlocked:
            for neighbor in orthogonal_neighbors(x, y):
                if neighbor not in unlocked:
                    frontier.add(neighbor)

        return [
            PurchasableArea(x=cx, y=cy, cost=self.purchase_cost((cx, cy)))
            for cx, cy in sorted(frontier)
        ]

    def validate_consistency(
        self, area_map: Optional[Mapping[Coord, AreaData]] = None
    ) -> ConsistencyReport:
        """Scan an area map for structural problems without raising."""
        areas = self.store.areas if area_map is None else area_map
        report = ConsistencyReport()

        seen: Dict[Coord, Coord] = {}
        for key, area in areas.items():
            expected = area.coord
            if tuple(key) != expected:
                report.errors.append(f"Area key mismatch: {key} vs {expected}")
            if expected in seen:
                report.errors.append(f"Duplicate area found: {expected}")
            seen[expected] = tuple(key)

        unlocked = {area.coord for area in areas.values() if area.unlocked}
        if not unlocked:
            report.errors.append("No unlocked areas found")
        if ORIGIN not in unlocked:
            report.errors.append("Origin area (0, 0) is not unlocked")
        else:
            orphaned = unlocked - _connected_from(ORIGIN, unlocked)
            for coord in sorted(orphaned):
                report.warnings.append(f"Unlocked area {coord} is not connected to the origin")

        return report

    def area_stats(self) -> AreaStats:
        total = self.store.area_count
        unlocked = len(self.unlocked_areas())
        frontier = self.list_purchasable()
        return AreaStats(
            total_areas=total,
            unlocked_areas=unlocked,
            locked_areas=total - unlocked,
            purchasable_areas=len(frontier),
            total_cost_to_purchase_all=sum(entry.cost for entry in frontier),
        )

    def areas_in_range(self, center: Coord, radius: int) -> List[AreaData]:
        """Areas in the square around ``center``. Unknown ones come back locked, unstored."""
        cx, cy = center
        result: List[AreaData] = []
        for x in range(cx - radius, cx + radius + 1):
            for y in range(cy - radius, cy + radius + 1):
                result.append(self.store.get_area(x, y) or AreaData(x=x, y=y, unlocked=False))
        return result


def _connected_from(start: Coord, cells: Set[Coord]) -> Set[Coord]:
    """Cells of ``cells`` 4-connected to ``start`` (BFS)."""
    if start not in cells:
        return set()
    visited = {start}
    queue = deque([start])
    while queue:
        current = queue.popleft()
        for neighbor in orthogonal_neighbors(*current):
            if neighbor in cells and neighbor not in visited:
                visited.add(neighbor)
                queue.append(neighbor)
    return visited
