"""Tests for the game state machine."""

import random

import pytest

from models.board import BOARD_SIZE, INITIAL_WALLS_PER_PLAYER, Position
from models.enums import Orientation
from models.player import Player
from models.state import GameState
from models.wall import Wall
from services.board_logic import GameBoard, get_valid_moves, wall_slots
from services.game_logic import (
    advance_pawn,
    apply_move,
    apply_wall,
    commit_wall,
    create_initial_state,
    force_turn_change,
)


def make_state(p0=(4, 0), p1=(4, 8), walls=(), current=0, walls_left=(10, 10), winner=None):
    return GameState(
        players=(Player(Position(*p0), walls_left[0]), Player(Position(*p1), walls_left[1])),
        current_player=current,
        walls=tuple(walls),
        winner=winner,
    )


def random_step(state, rng):
    """One random legal action for the side to move."""
    if state.active_player.walls_left > 0 and rng.random() < 0.3:
        for wall in rng.sample(wall_slots(), 20):
            new_state = apply_wall(wall.x, wall.z, wall.orientation, state)
            if new_state is not state:
                return new_state
    moves = sorted(get_valid_moves(state.current_player, state))
    if not moves:
        return force_turn_change(state)
    move = rng.choice(moves)
    return apply_move(move.x, move.z, state)


# ---------------------------------------------------------------------------
# Initial state
# ---------------------------------------------------------------------------

class TestInitialState:
    def test_layout(self):
        state = create_initial_state()
        assert state.players[0].position == (4, 0)
        assert state.players[1].position == (4, 8)
        assert state.players[0].walls_left == INITIAL_WALLS_PER_PLAYER
        assert state.players[1].walls_left == INITIAL_WALLS_PER_PLAYER
        assert state.current_player == 0
        assert state.walls == ()
        assert state.winner is None

    def test_fresh_each_call(self):
        assert create_initial_state() == create_initial_state()
        assert create_initial_state() is not create_initial_state()


# ---------------------------------------------------------------------------
# Moves
# ---------------------------------------------------------------------------

class TestApplyMove:
    def test_legal_move(self):
        state = create_initial_state()
        new_state = apply_move(4, 1, state)
        assert new_state.players[0].position == (4, 1)
        assert new_state.current_player == 1
        assert new_state.winner is None
        # input state untouched
        assert state.players[0].position == (4, 0)
        assert state.current_player == 0

    def test_illegal_move_returns_same_state(self):
        state = create_initial_state()
        assert apply_move(4, 2, state) is state
        assert apply_move(4, 8, state) is state
        assert apply_move(3, 1, state) is state

    def test_off_board(self):
        state = create_initial_state()
        assert apply_move(-1, 0, state) is state
        assert apply_move(4, BOARD_SIZE, state) is state

    def test_missing_coordinates(self):
        state = create_initial_state()
        assert apply_move(None, 1, state) is state
        assert apply_move(4, "1", state) is state

    def test_jump(self):
        state = make_state(p0=(4, 4), p1=(4, 5))
        assert apply_move(4, 6, state).players[0].position == (4, 6)

    def test_second_player_moves(self):
        state = apply_move(4, 1, create_initial_state())
        new_state = apply_move(4, 7, state)
        assert new_state.players[1].position == (4, 7)
        assert new_state.current_player == 0


class TestWinning:
    def test_reaching_goal_row_wins(self):
        state = make_state(p0=(4, 7), p1=(0, 8))
        new_state = apply_move(4, 8, state)
        assert new_state.winner == 0
        assert new_state.current_player == 1
        assert get_valid_moves(0, new_state) == set()
        assert get_valid_moves(1, new_state) == set()

    def test_second_player_wins_on_row_zero(self):
        state = make_state(p0=(0, 5), p1=(4, 1), current=1)
        assert apply_move(4, 0, state).winner == 1

    def test_finished_game_is_frozen(self):
        state = apply_move(4, 8, make_state(p0=(4, 7), p1=(0, 8)))
        assert apply_move(0, 7, state) is state
        assert apply_wall(4, 4, "horizontal", state) is state
        assert force_turn_change(state) is state


# ---------------------------------------------------------------------------
# Walls
# ---------------------------------------------------------------------------

class TestApplyWall:
    def test_legal_wall(self):
        state = create_initial_state()
        new_state = apply_wall(4, 4, "horizontal", state)
        assert new_state.walls == (Wall(4, 4, Orientation.HORIZONTAL),)
        assert new_state.walls[0].player_id == 0
        assert new_state.players[0].walls_left == INITIAL_WALLS_PER_PLAYER - 1
        assert new_state.players[1].walls_left == INITIAL_WALLS_PER_PLAYER
        assert new_state.current_player == 1
        assert state.walls == ()

    def test_enum_orientation(self):
        new_state = apply_wall(2, 3, Orientation.VERTICAL, create_initial_state())
        assert new_state.walls[0].orientation is Orientation.VERTICAL

    @pytest.mark.parametrize("orientation", ["diagonal", None, 3])
    def test_unknown_orientation(self, orientation):
        state = create_initial_state()
        assert apply_wall(4, 4, orientation, state) is state

    def test_overlap_rejected(self):
        state = apply_wall(4, 4, "horizontal", create_initial_state())
        assert apply_wall(4, 4, "horizontal", state) is state
        assert apply_wall(5, 4, "horizontal", state) is state
        assert apply_wall(4, 4, "vertical", state) is state

    def test_missing_coordinates(self):
        state = create_initial_state()
        assert apply_wall(None, 3, "horizontal", state) is state
        assert apply_wall(4, None, "vertical", state) is state
        assert apply_wall(4.0, 3, "horizontal", state) is state

    def test_out_of_walls(self):
        state = make_state(walls_left=(0, 10))
        assert apply_wall(4, 4, "horizontal", state) is state

    def test_enclosing_rejected(self):
        state = make_state(p0=(0, 0), walls=[Wall(0, 1, Orientation.HORIZONTAL, player_id=1)], current=1)
        assert apply_wall(1, 0, "vertical", state) is state


# ---------------------------------------------------------------------------
# Unchecked transitions
# ---------------------------------------------------------------------------

class TestTransitions:
    def test_advance_pawn(self):
        state = advance_pawn(create_initial_state(), (4, 1))
        assert state.players[0].position == (4, 1)
        assert state.current_player == 1

    def test_commit_wall_sets_owner(self):
        state = commit_wall(make_state(current=1), Wall(2, 2, Orientation.VERTICAL))
        assert state.walls[0].player_id == 1
        assert state.players[1].walls_left == 9
        assert state.current_player == 0

    def test_force_turn_change(self):
        state = create_initial_state()
        assert force_turn_change(state).current_player == 1
        assert force_turn_change(force_turn_change(state)).current_player == 0


# ---------------------------------------------------------------------------
# Invariants over random games
# ---------------------------------------------------------------------------

class TestRandomGames:
    @pytest.mark.parametrize("seed", range(5))
    def test_invariants_hold(self, seed):
        rng = random.Random(seed)
        state = create_initial_state()

        for _ in range(150):
            if state.is_finished:
                break
            state = random_step(state, rng)

            board = GameBoard(state)
            for index, player in enumerate(state.players):
                assert 0 <= player.x < BOARD_SIZE and 0 <= player.z < BOARD_SIZE
                assert player.walls_left + state.walls_placed_by(index) == INITIAL_WALLS_PER_PLAYER
                assert board.player_has_path(index)
            assert state.players[0].position != state.players[1].position
            assert len(set(state.walls)) == len(state.walls)
