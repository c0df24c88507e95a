from dataclasses import dataclass
from typing import Union

from .board import Position
from .enums import ActionType, Orientation
from .wall import Wall


@dataclass(frozen=True)
class MoveAction:
    x: int
    z: int

    type = ActionType.MOVE

    @property
    def position(self) -> Position:
        return Position(self.x, self.z)

    def to_dict(self):
        return {"type": self.type.value, "x": self.x, "z": self.z}


@dataclass(frozen=True)
class WallAction:
    x: int
    z: int
    orientation: Orientation

    type = ActionType.WALL

    def __post_init__(self):
        if not isinstance(self.orientation, Orientation):
            object.__setattr__(self, "orientation", Orientation(self.orientation))

    @property
    def wall(self) -> Wall:
        return Wall(self.x, self.z, self.orientation)

    @classmethod
    def from_wall(cls, wall: Wall) -> "WallAction":
        return cls(wall.x, wall.z, wall.orientation)

    def to_dict(self):
        return {
            "type": self.type.value,
            "x": self.x,
            "z": self.z,
            "orientation": self.orientation.value,
        }


Action = Union[MoveAction, WallAction]
