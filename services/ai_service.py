import logging
import math
import random
from collections import deque
from typing import Iterable, List, Optional, Tuple

from models.action import Action, MoveAction, WallAction
from models.board import Position, goal_row, opponent_of
from models.enums import Difficulty, Orientation
from models.player import Player
from models.state import GameState
from models.wall import Wall
from services.board_logic import GameBoard, blocking_wall_slots
from services.game_logic import advance_pawn, commit_wall

logger = logging.getLogger(__name__)

# BFS guard; the 9x9 graph never needs this many dequeues
MAX_PATH_ITERATIONS = 1000

EASY_MOVE_PROBABILITY = 0.8
MEDIUM_MOVE_PROBABILITY = 0.6

EASY_WALL_CHOICES = 5
MEDIUM_WALL_SAMPLE = 10

# cells of the opponent's path inspected for blocking walls
BLOCKING_PATH_CELLS = 4

HARD_SEARCH_DEPTH = 2
HARD_SAMPLED_WALLS = 5
MAX_WALL_ACTIONS = 10

EMERGENCY_WALL_ATTEMPTS = 100

WIN_SCORE = 1000
WALL_REJECTED_SCORE = -1000


class PathfindingMixin:
    """Row distance and BFS shortest paths for either player.

    Expects `player_index` and `opponent_index` on the host class.
    """

    def distance_to_goal(self, position, player_index: int) -> int:
        return abs(position[1] - goal_row(player_index))

    def shortest_path(self, state: GameState, player_index: int) -> List[Position]:
        """Cells from the player's pawn to their goal row, both ends included."""
        return self.shortest_path_from(GameBoard(state), state.players[player_index].position, goal_row(player_index))

    def shortest_path_from(self, board: GameBoard, start, target_row: int) -> List[Position]:
        start = Position(*start)
        parents = {start: None}
        queue = deque([start])
        iterations = 0

        while queue:
            iterations += 1
            if iterations > MAX_PATH_ITERATIONS:
                logger.warning("Path search from %s hit the iteration cap", start)
                break

            cell = queue.popleft()
            if cell.z == target_row:
                path = []
                while cell is not None:
                    path.append(cell)
                    cell = parents[cell]
                return path[::-1]

            for neighbour in board.neighbours(cell):
                if neighbour not in parents:
                    parents[neighbour] = cell
                    queue.append(neighbour)

        return self._synthetic_path(start, target_row)

    @staticmethod
    def _synthetic_path(start: Position, target_row: int) -> List[Position]:
        # straight column toward the goal row; keeps evaluation total
        step = 1 if target_row >= start.z else -1
        return [Position(start.x, z) for z in range(start.z, target_row + step, step)]

    def path_length(self, board: GameBoard, player_index: int) -> int:
        path = self.shortest_path_from(board, board.players[player_index].position, goal_row(player_index))
        return len(path) - 1


class WallSelectionMixin(PathfindingMixin):
    """Wall candidate generation and scoring, validated against the rules engine."""

    rng: random.Random

    def sample_valid_walls(self, state: GameState, limit: int, exclude: Iterable[Wall] = ()) -> List[Wall]:
        """Up to `limit` legal walls for the side to move, drawn in random slot order."""
        board = GameBoard(state)
        excluded = set(exclude)
        slots = list(blocking_wall_slots())
        self.rng.shuffle(slots)

        found = []
        for wall in slots:
            if len(found) >= limit:
                break
            if wall in excluded:
                continue
            if board.is_valid_wall(wall):
                found.append(wall)
        return found

    def find_blocking_walls(self, state: GameState, target_index: Optional[int] = None) -> List[Wall]:
        """Legal walls cutting the first steps of the target's shortest path."""
        if target_index is None:
            target_index = self.opponent_index

        path = self.shortest_path(state, target_index)
        if len(path) <= 1:
            return []

        steps = path[:BLOCKING_PATH_CELLS]
        candidates = []
        for current, following in zip(steps, steps[1:]):
            if current.x == following.x:
                low = min(current.z, following.z)
                candidates.append(Wall(current.x - 1, low, Orientation.HORIZONTAL))
                candidates.append(Wall(current.x, low, Orientation.HORIZONTAL))
            else:
                low = min(current.x, following.x)
                candidates.append(Wall(low, current.z - 1, Orientation.VERTICAL))
                candidates.append(Wall(low, current.z, Orientation.VERTICAL))

        board = GameBoard(state)
        blocking = []
        for wall in dict.fromkeys(candidates):
            if board.is_valid_wall(wall):
                blocking.append(wall)
        return blocking

    def evaluate_wall(self, wall: Wall, state: GameState) -> float:
        board = GameBoard(state)
        walled = board.with_wall(wall)

        # never consider a wall the rules would refuse for enclosing someone
        if not (walled.player_has_path(self.player_index) and walled.player_has_path(self.opponent_index)):
            return WALL_REJECTED_SCORE

        opponent_growth = self.path_length(walled, self.opponent_index) - self.path_length(board, self.opponent_index)
        own_growth = self.path_length(walled, self.player_index) - self.path_length(board, self.player_index)

        score = 10 * opponent_growth - 5 * own_growth

        opponent = state.players[self.opponent_index]
        if self.distance_to_goal(opponent.position, self.opponent_index) <= 2 and opponent_growth > 0:
            score += 15

        if state.players[self.player_index].walls_left <= 2:
            score -= 10

        return score

    def best_wall(self, walls: Iterable[Wall], state: GameState) -> Tuple[Optional[Wall], float]:
        best, best_score = None, -math.inf
        for wall in walls:
            score = self.evaluate_wall(wall, state)
            if score > best_score:
                best, best_score = wall, score
        return best, best_score


class QuoridorAI(WallSelectionMixin):
    """Base AI: sanitises the state, runs a tier strategy, and guarantees a
    legal answer through the emergency fallback (or None when stuck)."""

    difficulty = Difficulty.MEDIUM

    def __init__(self, player_index: int, seed: Optional[int] = None):
        if player_index not in (0, 1):
            raise ValueError(f"Player index {player_index} not supported")
        self.player_index = player_index
        self.opponent_index = opponent_of(player_index)
        self.rng = random.Random(seed)

    @property
    def name(self) -> str:
        return f"{self.difficulty.value} AI (player {self.player_index})"

    def decide(self, state: GameState) -> Optional[Action]:
        snapshot = self.sanitize(state)
        if snapshot.is_finished:
            logger.info("[%s] game is over, no decision", self.name)
            return None

        try:
            action = self.choose_action(snapshot)
        except Exception:
            logger.exception("[%s] strategy failed, falling back", self.name)
            action = None

        if action is None:
            logger.warning("[%s] strategy returned no decision, falling back", self.name)
        elif self.is_legal(action, snapshot):
            logger.debug("[%s] chose %s", self.name, action.to_dict())
            return action
        else:
            logger.warning("[%s] proposed illegal action %s, falling back", self.name, action.to_dict())

        try:
            return self.emergency_action(snapshot)
        except Exception:
            logger.exception("[%s] emergency fallback failed", self.name)
            return None

    def choose_action(self, state: GameState) -> Optional[Action]:
        raise NotImplementedError

    def sanitize(self, state: GameState) -> GameState:
        """Independent copy seen from this AI's seat, with UI flags dropped."""
        return GameState(
            players=tuple(Player(Position(*player.position), player.walls_left) for player in state.players),
            current_player=self.player_index,
            walls=tuple(Wall(wall.x, wall.z, wall.orientation, wall.player_id) for wall in state.walls),
            winner=state.winner,
            wall_mode=False,
        )

    def is_legal(self, action: Action, state: GameState) -> bool:
        board = GameBoard(state)
        if isinstance(action, MoveAction):
            return action.position in board.get_valid_moves(self.player_index)
        if isinstance(action, WallAction):
            return board.is_valid_wall(action.wall)
        return False

    def evaluate_move(self, move, state: GameState) -> float:
        """Score a destination cell: path shortening first, then tie-breaking bonuses."""
        target = Position(move[0], move[1]) if isinstance(move, tuple) else Position(move.x, move.z)
        player = state.players[self.player_index]
        opponent = state.players[self.opponent_index]
        board = GameBoard(state)
        target_row = goal_row(self.player_index)

        before = len(self.shortest_path_from(board, player.position, target_row)) - 1
        after = len(self.shortest_path_from(board, target, target_row)) - 1
        score = 10 * (before - after)

        if self.distance_to_goal(target, self.player_index) < self.distance_to_goal(opponent.position, self.opponent_index):
            score += 5

        if self.distance_to_goal(target, self.player_index) < self.distance_to_goal(player.position, self.player_index):
            score += 3

        return score

    def best_move(self, state: GameState) -> Optional[MoveAction]:
        moves = sorted(GameBoard(state).get_valid_moves(self.player_index))
        if not moves:
            return None
        # shuffled so ties do not always favour the same corner
        self.rng.shuffle(moves)
        best = max(moves, key=lambda move: self.evaluate_move(move, state))
        return MoveAction(best.x, best.z)

    def emergency_action(self, state: GameState) -> Optional[Action]:
        board = GameBoard(state)
        moves = sorted(board.get_valid_moves(self.player_index))
        if moves:
            move = self.rng.choice(moves)
            logger.warning("[%s] emergency move to (%s,%s)", self.name, move.x, move.z)
            return MoveAction(move.x, move.z)

        slots = blocking_wall_slots()
        for _ in range(EMERGENCY_WALL_ATTEMPTS):
            wall = self.rng.choice(slots)
            if board.is_valid_wall(wall):
                logger.warning("[%s] emergency wall at (%s,%s) %s", self.name, wall.x, wall.z, wall.orientation.value)
                return WallAction.from_wall(wall)

        logger.error("[%s] is stuck: no legal move and no wall found", self.name)
        return None


class EasyAI(QuoridorAI):
    """Mostly walks toward the goal; drops an unoptimised wall now and then."""

    difficulty = Difficulty.EASY

    def choose_action(self, state: GameState) -> Optional[Action]:
        me = state.players[self.player_index]
        should_move = self.rng.random() < EASY_MOVE_PROBABILITY or me.walls_left == 0

        if not should_move:
            walls = self.sample_valid_walls(state, EASY_WALL_CHOICES)
            if walls:
                return WallAction.from_wall(self.rng.choice(walls))

        return self.best_move(state)

    def evaluate_move(self, move, state: GameState) -> float:
        # row distance only
        player = state.players[self.player_index]
        return 10 * (self.distance_to_goal(player.position, self.player_index) - self.distance_to_goal(move, self.player_index))


class MediumAI(QuoridorAI):
    """Alternates between advancing and walls aimed at the opponent's path."""

    difficulty = Difficulty.MEDIUM

    def choose_action(self, state: GameState) -> Optional[Action]:
        me = state.players[self.player_index]
        should_move = self.rng.random() < MEDIUM_MOVE_PROBABILITY or me.walls_left == 0

        if not should_move:
            wall = self._pick_wall(state)
            if wall is not None:
                return WallAction.from_wall(wall)

        return self.best_move(state)

    def _pick_wall(self, state: GameState) -> Optional[Wall]:
        blocking = self.find_blocking_walls(state)
        wall, score = self.best_wall(blocking, state)
        if wall is not None and score > 0:
            return wall

        sample = self.sample_valid_walls(state, MEDIUM_WALL_SAMPLE, exclude=blocking)
        wall, score = self.best_wall(sample, state)
        if wall is not None and score > 0:
            return wall

        return None


class HardAI(QuoridorAI):
    """Minimax with alpha-beta pruning over moves and a bounded set of walls."""

    difficulty = Difficulty.HARD

    def __init__(self, player_index: int, seed: Optional[int] = None, depth: int = HARD_SEARCH_DEPTH):
        super().__init__(player_index, seed=seed)
        self.depth = depth

    def choose_action(self, state: GameState) -> Optional[Action]:
        target_row = goal_row(self.player_index)
        for move in sorted(GameBoard(state).get_valid_moves(self.player_index)):
            if move.z == target_row:
                return MoveAction(move.x, move.z)

        score, action = self.minimax(state, self.depth, True, -math.inf, math.inf)
        logger.debug("[%s] minimax score %s", self.name, score)
        return action

    def minimax(self, state: GameState, depth: int, maximizing: bool, alpha: float, beta: float):
        if depth == 0 or state.is_finished:
            return self.evaluate_game_state(state), None

        side = self.player_index if maximizing else self.opponent_index
        actions = self.generate_actions(state, side)
        if not actions:
            return self.evaluate_game_state(state), None

        best_action = actions[0]
        best_score = -math.inf if maximizing else math.inf

        for action in actions:
            child = self.apply_action(state, action)
            score, _ = self.minimax(child, depth - 1, not maximizing, alpha, beta)

            if maximizing:
                if score > best_score:
                    best_score, best_action = score, action
                alpha = max(alpha, best_score)
            else:
                if score < best_score:
                    best_score, best_action = score, action
                beta = min(beta, best_score)

            if beta <= alpha:
                break

        return best_score, best_action

    def generate_actions(self, state: GameState, side: int) -> List[Action]:
        """Legal moves plus at most MAX_WALL_ACTIONS walls for the side to move."""
        actions: List[Action] = [MoveAction(move.x, move.z) for move in sorted(GameBoard(state).get_valid_moves(side))]

        if state.players[side].walls_left > 0:
            blocking = self.find_blocking_walls(state, target_index=opponent_of(side))
            sampled = self.sample_valid_walls(state, HARD_SAMPLED_WALLS, exclude=blocking)
            for wall in (blocking + sampled)[:MAX_WALL_ACTIONS]:
                actions.append(WallAction.from_wall(wall))

        return actions

    @staticmethod
    def apply_action(state: GameState, action: Action) -> GameState:
        # actions come from generate_actions and are already legal
        if isinstance(action, MoveAction):
            return advance_pawn(state, action.position)
        return commit_wall(state, action.wall)

    def evaluate_game_state(self, state: GameState) -> float:
        if state.winner == self.player_index:
            return WIN_SCORE
        if state.winner == self.opponent_index:
            return -WIN_SCORE

        board = GameBoard(state)
        me = state.players[self.player_index]
        opponent = state.players[self.opponent_index]

        my_path = self.path_length(board, self.player_index)
        opponent_path = self.path_length(board, self.opponent_index)
        my_distance = self.distance_to_goal(me.position, self.player_index)
        opponent_distance = self.distance_to_goal(opponent.position, self.opponent_index)

        score = 20 * (opponent_path - my_path)
        score += 10 * (opponent_distance - my_distance)
        score += 5 * (me.walls_left - opponent.walls_left)

        if my_distance <= 2:
            score += 15
        if my_path < opponent_path:
            score += 10

        return score


AI_CLASSES = {
    Difficulty.EASY: EasyAI,
    Difficulty.MEDIUM: MediumAI,
    Difficulty.HARD: HardAI,
}


def create_ai(player_index: int, difficulty="medium", seed: Optional[int] = None) -> QuoridorAI:
    try:
        level = difficulty if isinstance(difficulty, Difficulty) else Difficulty(str(difficulty).lower())
    except ValueError:
        logger.warning("Difficulty %r not supported, using medium", difficulty)
        level = Difficulty.MEDIUM
    return AI_CLASSES[level](player_index, seed=seed)
