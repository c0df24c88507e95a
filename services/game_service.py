import logging
from typing import Dict, Optional

from models.action import MoveAction, WallAction
from models.enums import ActionType
from models.state import GameState
from services.ai_service import QuoridorAI, create_ai
from services.board_logic import GameBoard
from services.game_logic import apply_move, apply_wall, create_initial_state, force_turn_change
from services.utils import to_wall

logger = logging.getLogger(__name__)


class GameService:
    """One game session: holds the current state and drives human and AI turns."""

    def __init__(self, ai_players: Optional[Dict[int, str]] = None, seed: Optional[int] = None):
        self.seed = seed
        self.ai_players: Dict[int, QuoridorAI] = {}
        for index, difficulty in (ai_players or {}).items():
            # distinct but reproducible streams per seat
            ai_seed = None if seed is None else seed + index
            self.ai_players[index] = create_ai(index, difficulty, seed=ai_seed)
        self.state: GameState = create_initial_state()

    def reset_game(self) -> GameState:
        self.state = create_initial_state()
        logger.info("New game started")
        return self.state

    def get_valid_moves(self):
        return GameBoard(self.state).get_valid_moves(self.state.current_player)

    def is_valid_wall(self, x: int, z: int, orientation) -> bool:
        wall = to_wall({"x": x, "z": z, "orientation": orientation})
        return wall is not None and GameBoard(self.state).is_valid_wall(wall)

    def move_player(self, x: int, z: int) -> bool:
        new_state = apply_move(x, z, self.state)
        if new_state is self.state:
            return False
        self.state = new_state
        return True

    def place_wall(self, x: int, z: int, orientation) -> bool:
        new_state = apply_wall(x, z, orientation, self.state)
        if new_state is self.state:
            return False
        self.state = new_state
        return True

    def perform_action(self, action) -> bool:
        """Apply a MoveAction, a WallAction or the equivalent dict."""
        if isinstance(action, MoveAction):
            return self.move_player(action.x, action.z)
        if isinstance(action, WallAction):
            return self.place_wall(action.x, action.z, action.orientation)

        if isinstance(action, dict):
            if action.get("type") == ActionType.MOVE.value:
                return self.move_player(action.get("x"), action.get("z"))
            if action.get("type") == ActionType.WALL.value:
                return self.place_wall(action.get("x"), action.get("z"), action.get("orientation"))

        logger.debug("Unknown action %r", action)
        return False

    def check_winner(self) -> Optional[int]:
        return self.state.winner

    def is_ai_turn(self) -> bool:
        return not self.state.is_finished and self.state.current_player in self.ai_players

    def ia_play(self) -> dict:
        if self.state.is_finished:
            return {"success": False, "error": "Game is over", "action": None}

        player_index = self.state.current_player
        ai = self.ai_players.get(player_index)
        if ai is None:
            return {"success": False, "error": f"Player {player_index} is not controlled by an AI", "action": None}

        action = ai.decide(self.state)
        if action is None:
            return self._skip_stuck_turn(player_index, "AI found no legal action")

        if not self.perform_action(action):
            return self._skip_stuck_turn(player_index, f"AI action rejected: {action.to_dict()}")

        response = {
            "success": True,
            "action": action.to_dict(),
            "player": player_index,
        }
        if self.state.is_finished:
            response["winner"] = self.state.winner
        logger.info("[ia_play] %s", response)
        return response

    def _skip_stuck_turn(self, player_index: int, reason: str) -> dict:
        logger.error("[ia_play] Player %s is stuck (%s), passing the turn", player_index, reason)
        self.state = force_turn_change(self.state)
        return {
            "success": False,
            "stuck": True,
            "error": reason,
            "action": None,
            "player": player_index,
        }
