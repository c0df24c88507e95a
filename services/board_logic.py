import logging
from collections import deque
from functools import lru_cache
from typing import Iterable, Optional

from models.board import BOARD_SIZE, WALL_GRID_SIZE, Position, goal_row, opponent_of
from models.enums import Direction, Orientation
from models.state import GameState
from models.wall import Wall
from services.utils import to_wall

logger = logging.getLogger(__name__)

STEP_DELTAS = {
    Direction.UP: (0, 1),
    Direction.DOWN: (0, -1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
}

# jumping along one axis falls back to side-steps along the other
SIDE_STEPS = {
    Direction.UP: (Direction.LEFT, Direction.RIGHT),
    Direction.DOWN: (Direction.LEFT, Direction.RIGHT),
    Direction.LEFT: (Direction.UP, Direction.DOWN),
    Direction.RIGHT: (Direction.UP, Direction.DOWN),
}


def is_within_board(x: int, z: int) -> bool:
    return 0 <= x < BOARD_SIZE and 0 <= z < BOARD_SIZE


def is_wall_slot_within_board(wall: Wall) -> bool:
    """Horizontal slots run x 0..7, z 1..8; vertical slots run x 1..8, z 0..7."""
    if wall.orientation == Orientation.HORIZONTAL:
        return 0 <= wall.x <= WALL_GRID_SIZE - 1 and 1 <= wall.z <= WALL_GRID_SIZE
    return 1 <= wall.x <= WALL_GRID_SIZE and 0 <= wall.z <= WALL_GRID_SIZE - 1


def _build_wall_slots() -> tuple:
    slots = []
    for orientation in (Orientation.HORIZONTAL, Orientation.VERTICAL):
        for x in range(BOARD_SIZE):
            for z in range(BOARD_SIZE):
                wall = Wall(x=x, z=z, orientation=orientation)
                if is_wall_slot_within_board(wall):
                    slots.append(wall)
    return tuple(slots)


WALL_SLOTS = _build_wall_slots()


def wall_slots() -> tuple:
    """Every slot a wall may be anchored on, horizontal slots first."""
    return WALL_SLOTS


def blocking_wall_slots() -> tuple:
    """Slots whose wall cuts at least one step between two board cells."""
    return BLOCKING_WALL_SLOTS


def calculate_new_position(position: Position, direction: Direction) -> Position:
    dx, dz = STEP_DELTAS[direction]
    return Position(position[0] + dx, position[1] + dz)


def walls_overlap(first: Wall, second: Wall) -> bool:
    """Same-line walls overlap when their anchors are less than two cells apart;
    perpendicular walls overlap when they cross on the same anchor."""
    if first.orientation == second.orientation:
        if first.is_horizontal:
            return first.z == second.z and abs(first.x - second.x) <= 1
        return first.x == second.x and abs(first.z - second.z) <= 1
    return first.x == second.x and first.z == second.z


def _edge(a: Position, b: Position) -> tuple:
    return (a, b) if a <= b else (b, a)


def _build_neighbour_table() -> dict:
    table = {}
    for x in range(BOARD_SIZE):
        for z in range(BOARD_SIZE):
            cell = Position(x, z)
            steps = []
            for direction in Direction:
                target = calculate_new_position(cell, direction)
                if is_within_board(*target):
                    steps.append((target, _edge(cell, target)))
            table[cell] = tuple(steps)
    return table


# on-board neighbours of every cell with the edge key each step crosses
NEIGHBOUR_TABLE = _build_neighbour_table()


@lru_cache(maxsize=4096)
def blocked_edges(walls: tuple) -> frozenset:
    """Cell-to-cell edges cut by the walls, each stored lower cell first."""
    edges = set()
    for wall in walls:
        if wall.is_horizontal:
            for x in (wall.x, wall.x + 1):
                edges.add((Position(x, wall.z), Position(x, wall.z + 1)))
        else:
            for z in (wall.z, wall.z + 1):
                edges.add((Position(wall.x, z), Position(wall.x + 1, z)))
    return frozenset(edges)


# slots on the last row or column only cut edges that lead off the board
BLOCKING_WALL_SLOTS = tuple(
    wall for wall in WALL_SLOTS
    if any(is_within_board(*a) and is_within_board(*b) for a, b in blocked_edges((wall,)))
)


class GameBoard:
    """Read-only rules view over a GameState (optionally with extra walls)."""

    def __init__(self, state: GameState, walls: Optional[Iterable[Wall]] = None):
        self.state = state
        self.size = BOARD_SIZE
        self.players = state.players
        self.walls = tuple(state.walls if walls is None else walls)
        self._blocked = blocked_edges(self.walls)

    def with_wall(self, wall: Wall) -> "GameBoard":
        return GameBoard(self.state, self.walls + (wall,))

    def is_blocked(self, start, end) -> bool:
        """True when a wall sits on the edge between two adjacent cells."""
        return _edge(Position(*start), Position(*end)) in self._blocked

    def neighbours(self, cell: Position):
        for target, edge in NEIGHBOUR_TABLE[cell]:
            if edge not in self._blocked:
                yield target

    def get_valid_moves(self, player_index: int) -> set:
        if self.state.is_finished:
            return set()

        mover = self.players[player_index].position
        rival = self.players[opponent_of(player_index)].position

        valid_moves = set()
        for direction in Direction:
            target = calculate_new_position(mover, direction)
            if not is_within_board(*target) or self.is_blocked(mover, target):
                continue
            if target == rival:
                valid_moves.update(self._jump_moves(mover, rival, direction))
            else:
                valid_moves.add(target)
        return valid_moves

    def _jump_moves(self, mover: Position, rival: Position, direction: Direction) -> set:
        landing = calculate_new_position(rival, direction)
        if is_within_board(*landing) and not self.is_blocked(rival, landing):
            return {landing}

        # straight jump blocked by a wall or the board edge
        jumps = set()
        for side in SIDE_STEPS[direction]:
            diagonal = calculate_new_position(rival, side)
            if diagonal == mover:
                continue
            if is_within_board(*diagonal) and not self.is_blocked(rival, diagonal):
                jumps.add(diagonal)
        return jumps

    def has_path(self, start, target_row: int) -> bool:
        start = Position(*start)
        visited = {start}
        queue = deque([start])

        while queue:
            cell = queue.popleft()
            if cell.z == target_row:
                return True
            for neighbour in self.neighbours(cell):
                if neighbour not in visited:
                    visited.add(neighbour)
                    queue.append(neighbour)

        return False

    def player_has_path(self, player_index: int) -> bool:
        return self.has_path(self.players[player_index].position, goal_row(player_index))

    def is_valid_wall(self, wall: Wall) -> bool:
        if self.state.is_finished:
            logger.debug("[INVALID] Game is over, no wall at (%s,%s)", wall.x, wall.z)
            return False

        if not is_wall_slot_within_board(wall):
            logger.debug("[INVALID] Wall (%s,%s) %s is off the wall grid", wall.x, wall.z, wall.orientation.value)
            return False

        if self.state.active_player.walls_left <= 0:
            logger.debug("[INVALID] Player %s has no walls left", self.state.current_player)
            return False

        for existing in self.walls:
            if walls_overlap(existing, wall):
                logger.debug("[INVALID] Wall (%s,%s) %s collides with (%s,%s) %s",
                             wall.x, wall.z, wall.orientation.value,
                             existing.x, existing.z, existing.orientation.value)
                return False

        candidate = self.with_wall(wall)
        if not (candidate.player_has_path(0) and candidate.player_has_path(1)):
            logger.debug("[INVALID] Wall (%s,%s) %s blocks every path", wall.x, wall.z, wall.orientation.value)
            return False

        return True


def get_valid_moves(player_index: int, state: GameState) -> set:
    """Every cell the given player may move to from the current state."""
    return GameBoard(state).get_valid_moves(player_index)


def is_valid_wall_placement(wall_candidate, state: GameState) -> bool:
    """Check a wall candidate for the player whose turn it is."""
    wall = to_wall(wall_candidate)
    if wall is None:
        logger.debug("[INVALID] Not a wall candidate: %r", wall_candidate)
        return False
    return GameBoard(state).is_valid_wall(wall)


def has_path(start, target_row: int, walls: Iterable[Wall]) -> bool:
    """Reachability of a row from a cell given a set of walls (pawns ignored)."""
    board = GameBoard(GameState(players=()), walls)
    return board.has_path(start, target_row)
