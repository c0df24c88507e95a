from dataclasses import dataclass, field
from typing import Optional

from .enums import Orientation


@dataclass(frozen=True)
class Wall:
    """A wall anchored on a slot of the 8x8 interior grid.

    Horizontal at (x, z): blocks steps between rows z and z+1, columns x and x+1.
    Vertical at (x, z): blocks steps between columns x and x+1, rows z and z+1.
    """

    x: int
    z: int
    orientation: Orientation
    # who placed it; excluded from equality so candidates match placed walls
    player_id: Optional[int] = field(default=None, compare=False)

    def __post_init__(self):
        if not isinstance(self.orientation, Orientation):
            object.__setattr__(self, "orientation", Orientation(self.orientation))

    @property
    def is_horizontal(self) -> bool:
        return self.orientation == Orientation.HORIZONTAL

    def to_dict(self):
        return {
            "player_id": self.player_id,
            "x": self.x,
            "z": self.z,
            "orientation": self.orientation.value,
        }
