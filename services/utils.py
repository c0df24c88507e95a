from typing import Optional

from models.enums import Orientation
from models.wall import Wall


def coerce_orientation(orientation) -> Optional[Orientation]:
    """Accept an Orientation or its string value ("horizontal"/"vertical")."""
    if isinstance(orientation, Orientation):
        return orientation
    try:
        return Orientation(str(orientation).lower())
    except ValueError:
        return None


def to_wall(candidate, player_id: Optional[int] = None) -> Optional[Wall]:
    """Build a Wall from a Wall, a WallAction or a {"x", "z", "orientation"} dict.

    Returns None when the candidate cannot describe a wall slot.
    """
    x = candidate.get("x") if isinstance(candidate, dict) else getattr(candidate, "x", None)
    z = candidate.get("z") if isinstance(candidate, dict) else getattr(candidate, "z", None)
    orientation = candidate.get("orientation") if isinstance(candidate, dict) else getattr(candidate, "orientation", None)

    orientation = coerce_orientation(orientation)
    if orientation is None or not isinstance(x, int) or not isinstance(z, int):
        return None
    return Wall(x=x, z=z, orientation=orientation, player_id=player_id)
