from dataclasses import dataclass, replace

from .board import Position


@dataclass(frozen=True)
class Player:
    position: Position
    walls_left: int

    def __post_init__(self):
        if not isinstance(self.position, Position):
            object.__setattr__(self, "position", Position(*self.position))

    @property
    def x(self) -> int:
        return self.position.x

    @property
    def z(self) -> int:
        return self.position.z

    def moved_to(self, position: Position) -> "Player":
        return replace(self, position=position)

    def spend_wall(self) -> "Player":
        return replace(self, walls_left=self.walls_left - 1)

    def to_dict(self):
        return {
            "position": self.position.to_dict(),
            "wallsLeft": self.walls_left,
        }
