# models/board.py
from typing import NamedTuple

BOARD_SIZE = 9
WALL_GRID_SIZE = BOARD_SIZE - 1
INITIAL_WALLS_PER_PLAYER = 10

# goal row per player index: player 0 walks up to z=8, player 1 down to z=0
GOAL_ROWS = (BOARD_SIZE - 1, 0)
START_POSITIONS = ((4, 0), (4, BOARD_SIZE - 1))


class Position(NamedTuple):
    x: int
    z: int

    def to_dict(self):
        return {"x": self.x, "z": self.z}


def goal_row(player_index: int) -> int:
    return GOAL_ROWS[player_index]


def opponent_of(player_index: int) -> int:
    return 1 - player_index
