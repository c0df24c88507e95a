from dotenv import load_dotenv
import os

load_dotenv()

LOG_LEVEL = os.getenv("QUORIDOR_LOG_LEVEL", "INFO").upper()

PLAYER_0_AI = os.getenv("QUORIDOR_PLAYER_0_AI", "hard")
PLAYER_1_AI = os.getenv("QUORIDOR_PLAYER_1_AI", "medium")

# unset means a fresh random game every run
_seed = os.getenv("QUORIDOR_AI_SEED")
AI_SEED = int(_seed) if _seed else None

MAX_TURNS = int(os.getenv("QUORIDOR_MAX_TURNS", "200"))
