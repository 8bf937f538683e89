from pathlib import Path

# Base project directory
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Data directories
DATA_DIR = PROJECT_ROOT / "data"
TABLES_DIR = DATA_DIR / "tables"

# Multiplier table cache (use .format(total_steps=N))
MULTIPLIER_CSV_PATTERN = "multiplier_array_{total_steps}.csv"
MULTIPLIER_COLUMNS = ["Step", "Multiplier"]

# Default run settings
DEFAULT_MODE = "base"
DEFAULT_CASHOUT_STRATEGY = "R"  # "R" for random, or a step number
