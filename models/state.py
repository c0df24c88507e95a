from dataclasses import dataclass
from typing import Optional, Tuple

from .board import opponent_of
from .player import Player
from .wall import Wall


@dataclass(frozen=True)
class GameState:
    """Snapshot of a game. Transitions build a new instance, never mutate one."""

    players: Tuple[Player, Player]
    current_player: int = 0
    walls: Tuple[Wall, ...] = ()
    winner: Optional[int] = None
    # transient UI flag carried for the presentation layer; rules ignore it
    wall_mode: bool = False

    def __post_init__(self):
        object.__setattr__(self, "players", tuple(self.players))
        object.__setattr__(self, "walls", tuple(self.walls))

    @property
    def is_finished(self) -> bool:
        return self.winner is not None

    @property
    def active_player(self) -> Player:
        return self.players[self.current_player]

    @property
    def waiting_player(self) -> Player:
        return self.players[opponent_of(self.current_player)]

    def walls_placed_by(self, player_index: int) -> int:
        return sum(1 for wall in self.walls if wall.player_id == player_index)

    def to_dict(self):
        return {
            "players": [player.to_dict() for player in self.players],
            "currentPlayer": self.current_player,
            "walls": [wall.to_dict() for wall in self.walls],
            "winner": self.winner,
        }
