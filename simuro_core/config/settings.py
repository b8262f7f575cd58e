from pathlib import Path

TICKS_PER_SECOND = 66

ROBOTS_PER_TEAM = 5
MAX_WHEEL_SPEED = 125.0  # cm/s, symmetric limit accepted by the field host

# Network
BLUE_STRATEGY_PORT = 20000
YELLOW_STRATEGY_PORT = 20001
STRATEGY_CONNECT_TIMEOUT = 2.0  # seconds
STRATEGY_CALL_TIMEOUT = 2.0  # seconds
RPC_BUFFER_SIZE = 8192

### MATCH FLOW ###
PLACEMENT_PAUSE_SECONDS = 2.0  # hold after a goal/foul before the reposition is applied
POST_PLACEMENT_HOLD_SECONDS = 2.0  # hold after a reposition before play resumes

LOG_FILE = Path.cwd() / "Simuro.log"
STATUS_PRINT_INTERVAL = 1.0  # seconds
