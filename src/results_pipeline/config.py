from pathlib import Path

# Base project directory
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Output directory for per-run CSV logs
OUTPUT_DIR = PROJECT_ROOT / "data" / "output"

# CSV file names (use .format(total_steps=N))
ROUNDS_CSV_PATTERN = "simulation_rounds_{total_steps}.csv"
BONUS_CSV_PATTERN = "bonus_rounds_{total_steps}.csv"

ROUND_COLUMNS = [
    "Game Number", "Final Step", "Multiplier", "Outcome",
    "Winnings", "Cost", "Crash Point", "Cashout Point", "Used Bonus",
]

BONUS_COLUMNS = [
    "Game Number", "Current Step", "Result Step", "Cost", "RTP",
    "Game Crush Point", "Redistributed Crush Point",
]

# Rows buffered in memory before each append to disk
FLUSH_EVERY = 10_000
