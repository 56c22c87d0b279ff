from __future__ import annotations

import math
from collections.abc import Collection, Sequence
from dataclasses import dataclass
from typing import Protocol, TypeVar

from domain.keyboard import Direction
from domain.models import DiagramNode
from domain.services.selectable_items import node_center


class Located(Protocol):
    @property
    def x(self) -> float: ...

    @property
    def y(self) -> float: ...


T = TypeVar("T", bound=Located)

_DIAGONAL_BEARINGS: dict[str, float] = {
    "up-right": -math.pi / 4,
    "down-right": math.pi / 4,
    "down-left": 3 * math.pi / 4,
    "up-left": -3 * math.pi / 4,
}


@dataclass(frozen=True)
class NavigationOptions:
    min_distance: float = 20.0
    tolerance_step: float = 50.0
    max_tolerance: float = 500.0
    # Diagonal window: base_angle + (tolerance / angle_reference) * angle_widening.
    base_angle: float = math.pi / 6
    angle_widening: float = math.pi / 6
    angle_reference: float = 500.0

    def tolerance_bands(self) -> list[float]:
        if self.tolerance_step <= 0:
            msg = f"tolerance_step must be positive, got {self.tolerance_step}"
            raise ValueError(msg)
        bands: list[float] = []
        index = 1
        while index * self.tolerance_step <= self.max_tolerance:
            bands.append(index * self.tolerance_step)
            index += 1
        return bands

    def angular_tolerance(self, tolerance: float) -> float:
        return self.base_angle + (tolerance / self.angle_reference) * self.angle_widening


DEFAULT_NAVIGATION_OPTIONS = NavigationOptions()


@dataclass(frozen=True)
class _NodePoint:
    node: DiagramNode
    x: float
    y: float


def find_closest_in_direction(
    origin_x: float,
    origin_y: float,
    direction: Direction,
    items: Sequence[T],
    options: NavigationOptions = DEFAULT_NAVIGATION_OPTIONS,
) -> T | None:
    """Pick the nearest item that lies in ``direction`` from the origin.

    Candidates are evaluated in expanding tolerance bands. Cardinal directions
    bound the perpendicular offset by the band tolerance and rank by distance
    along the primary axis; diagonal directions accept items inside an angular
    window around the 45 degree bearing (widening with the band) and rank by
    Euclidean distance. The first band that yields a candidate wins, so an
    item that is closer but far off-axis never beats a well aligned one.
    """
    is_diagonal = direction in _DIAGONAL_BEARINGS

    for tolerance in options.tolerance_bands():
        closest: T | None = None
        closest_distance = math.inf
        angular_tolerance = options.angular_tolerance(tolerance)

        for item in items:
            delta_x = item.x - origin_x
            delta_y = item.y - origin_y

            if is_diagonal:
                in_direction, distance = _diagonal_fit(
                    delta_x, delta_y, direction, angular_tolerance, options.min_distance
                )
            else:
                in_direction, distance = _cardinal_fit(
                    delta_x, delta_y, direction, tolerance, options.min_distance
                )

            if in_direction and distance < closest_distance:
                closest = item
                closest_distance = distance

        if closest is not None:
            return closest

    return None


def find_closest_node_in_direction(
    origin_x: float,
    origin_y: float,
    direction: Direction,
    nodes: Sequence[DiagramNode],
    exclude_ids: Collection[str] = (),
    options: NavigationOptions = DEFAULT_NAVIGATION_OPTIONS,
) -> DiagramNode | None:
    points = []
    for node in nodes:
        if node.id in exclude_ids:
            continue
        x, y = node_center(node)
        points.append(_NodePoint(node=node, x=x, y=y))

    result = find_closest_in_direction(origin_x, origin_y, direction, points, options)
    return result.node if result is not None else None


def _cardinal_fit(
    delta_x: float,
    delta_y: float,
    direction: Direction,
    tolerance: float,
    min_distance: float,
) -> tuple[bool, float]:
    if direction in ("left", "right"):
        primary, perpendicular = delta_x, delta_y
        sign_matches = delta_x < 0 if direction == "left" else delta_x > 0
    else:
        primary, perpendicular = delta_y, delta_x
        sign_matches = delta_y < 0 if direction == "up" else delta_y > 0

    primary_distance = abs(primary)
    in_direction = (
        sign_matches and primary_distance >= min_distance and abs(perpendicular) <= tolerance
    )
    return in_direction, primary_distance


def _diagonal_fit(
    delta_x: float,
    delta_y: float,
    direction: Direction,
    angular_tolerance: float,
    min_distance: float,
) -> tuple[bool, float]:
    distance = math.hypot(delta_x, delta_y)
    angle = math.atan2(delta_y, delta_x)
    angle_diff = abs(angle - _DIAGONAL_BEARINGS[direction])
    if angle_diff > math.pi:
        angle_diff = 2 * math.pi - angle_diff
    return angle_diff <= angular_tolerance and distance >= min_distance, distance
