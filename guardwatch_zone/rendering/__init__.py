"""
Rendering Layer
===============

Bounded Context: Live map visualization and drawing.

Responsibilities:
- Draw site zones (circles, polygons) and site labels
- Draw guard markers by effective status
- Draw the status legend
- Pure rendering - no logic, no state

Non-responsibilities:
- Membership (handled by geometry)
- Counting (handled by analytics)
- Anchor resolution (handled by geometry.anchor)

Design:
- Stateless drawing functions
- Uses supervision.draw.utils
- Configurable styles
"""

from guardwatch_zone.rendering.visualizer import MapVisualizer, STATUS_COLORS

__all__ = [
    "MapVisualizer",
    "STATUS_COLORS",
]
