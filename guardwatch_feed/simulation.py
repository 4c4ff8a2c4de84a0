"""
Position Simulation
===================

Bounded Context: Synthetic location feed for demos and offline runs.

Each tick moves every located guard by a bounded random walk (meters, in a
random bearing) and writes the result through the GuardStore. Guards on
panic/alert keep still; guards without a fix stay without one.
"""

import random
from typing import Dict, Optional

from guardwatch_feed.logging import LogEvent, StructuredLogger, create_logger
from guardwatch_feed.schemas import LatLng
from guardwatch_feed.store import GuardStore
from guardwatch_zone.geometry.primitives import destination_point
from guardwatch_zone.models import EMERGENCY_STATUSES


class PositionSimulator:
    """
    Random-walk position generator.

    Attributes:
        max_step_m: Largest displacement per tick
    """

    def __init__(
        self,
        store: GuardStore,
        max_step_m: float = 25.0,
        rng: Optional[random.Random] = None,
        logger: Optional[StructuredLogger] = None,
    ):
        if max_step_m < 0:
            raise ValueError(f"max_step_m must be >= 0, got {max_step_m}")
        self.store = store
        self.max_step_m = max_step_m
        self._rng = rng or random.Random()
        self._logger = logger or create_logger("simulation")

    def tick(self) -> int:
        """
        Advance every located guard once.

        Returns:
            Number of guards moved
        """
        moves: Dict[str, LatLng] = {}
        for record in self.store.snapshot().guards:
            if record.location is None or record.status in EMERGENCY_STATUSES:
                continue

            distance = self._rng.uniform(0.0, self.max_step_m)
            bearing = self._rng.uniform(0.0, 360.0)
            moved = destination_point(record.location.to_coordinate(), bearing, distance)
            moves[record.id] = LatLng.from_coordinate(moved)

        if moves:
            self.store.update_positions(moves)

        self._logger.debug(
            event=LogEvent.FEED_SIMULATION_TICK,
            message="Simulated positions advanced",
            metadata={'moved': len(moves)}
        )
        return len(moves)
