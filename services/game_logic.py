import logging
from dataclasses import replace

from models.board import INITIAL_WALLS_PER_PLAYER, START_POSITIONS, Position, goal_row, opponent_of
from models.player import Player
from models.state import GameState
from models.wall import Wall
from services.board_logic import GameBoard, is_within_board
from services.utils import to_wall

logger = logging.getLogger(__name__)


def create_initial_state() -> GameState:
    return GameState(
        players=tuple(Player(Position(*start), INITIAL_WALLS_PER_PLAYER) for start in START_POSITIONS),
        current_player=0,
        walls=(),
        winner=None,
    )


def _with_player(players, index: int, player: Player) -> tuple:
    updated = list(players)
    updated[index] = player
    return tuple(updated)


def advance_pawn(state: GameState, position) -> GameState:
    """Move the current player's pawn without checking legality."""
    mover = state.current_player
    position = Position(*position)
    players = _with_player(state.players, mover, state.players[mover].moved_to(position))
    winner = mover if position.z == goal_row(mover) else None
    # the turn passes even on the winning move; a finished game accepts nothing
    return replace(state, players=players, current_player=opponent_of(mover), winner=winner)


def commit_wall(state: GameState, wall: Wall) -> GameState:
    """Append a wall for the current player without checking legality."""
    mover = state.current_player
    placed = replace(wall, player_id=mover)
    players = _with_player(state.players, mover, state.players[mover].spend_wall())
    return replace(state, players=players, walls=state.walls + (placed,), current_player=opponent_of(mover))


def force_turn_change(state: GameState) -> GameState:
    """Hand the turn over without an action; used to recover from a stuck AI."""
    if state.is_finished:
        return state
    return replace(state, current_player=opponent_of(state.current_player))


def apply_move(x: int, z: int, state: GameState) -> GameState:
    if state.is_finished:
        logger.debug("Move to (%s,%s) ignored: game is over", x, z)
        return state
    if not isinstance(x, int) or not isinstance(z, int) or not is_within_board(x, z):
        logger.debug("Move to (%s,%s) ignored: off the board", x, z)
        return state

    board = GameBoard(state)
    if Position(x, z) not in board.get_valid_moves(state.current_player):
        logger.debug("Move to (%s,%s) ignored: not reachable for player %s", x, z, state.current_player)
        return state

    new_state = advance_pawn(state, (x, z))
    if new_state.is_finished:
        logger.info("Player %s reached the goal row and wins", new_state.winner)
    return new_state


def apply_wall(x: int, z: int, orientation, state: GameState) -> GameState:
    if state.is_finished:
        logger.debug("Wall at (%s,%s) ignored: game is over", x, z)
        return state

    wall = to_wall({"x": x, "z": z, "orientation": orientation})
    if wall is None:
        logger.debug("Wall at (%s,%s) %r ignored: not a wall slot", x, z, orientation)
        return state

    if not GameBoard(state).is_valid_wall(wall):
        return state

    return commit_wall(state, wall)
