import logging

import settings
from services.game_service import GameService

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def play_self_game(max_turns: int = settings.MAX_TURNS) -> GameService:
    service = GameService(
        ai_players={0: settings.PLAYER_0_AI, 1: settings.PLAYER_1_AI},
        seed=settings.AI_SEED,
    )
    logger.info("Self-play: player 0 (%s) vs player 1 (%s)", settings.PLAYER_0_AI, settings.PLAYER_1_AI)

    for turn in range(1, max_turns + 1):
        if service.state.is_finished:
            break
        result = service.ia_play()
        logger.info("Turn %s: %s", turn, result)

    winner = service.check_winner()
    if winner is None:
        logger.info("No winner after %s turns", max_turns)
    else:
        logger.info("Player %s wins", winner)
    return service


if __name__ == "__main__":
    play_self_game()
