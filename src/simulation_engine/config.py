# Speed modes: steps advanced per ordinary move
SPEED_MODES = {
    "Normal": 1,
    "Fast": 3,
    "Swift": 10,
}

# Shared economics
BASE_STAKE = 1.0
TARGET_RTP = 0.97  # Target RTP of the base game
BONUS_RTP = 0.95  # Target RTP used to price bonuses
TARGET_MAX_MULTIPLIER = 15000.0  # Multiplier at the last step
TAIL_CRASH_PROBABILITY = 0.0001  # Mass reserved for "no crash within range"
DRAGON_CRASH_PROBABILITY = 0.5

# Bonus activation
FREE_BONUS_PROBABILITY = 0.05  # At step 0, decays linearly to 0
BONUS_ACTIVATION_PROBABILITY = 0.5  # Per move in bonus-testing modes

# Jump bins are (kind, low, high, probability).
#   "ranged"     - uniform jump distance in [low, high]
#   "exact"      - jump exactly `low` steps
#   "top"        - jump straight to the last step
#   "tail_range" - land on a uniform step in [low, high] (absolute steps)
PRESETS = {
    "50": {
        "total_steps": 50,
        "lambda_crash": 0.202,
        "free_bonus_step_threshold": 5,
        "free_bonus_types": ("mystic",),
        "bonuses": {
            "mystic": {
                "target_jump_steps": 8,
                "crash_probability": 0.0,
                "jump_distribution": [
                    ("ranged", 3, 5, 0.1994),
                    ("ranged", 6, 7, 0.2991),
                    ("exact", 8, 8, 0.2991),
                    ("ranged", 9, 10, 0.14955),
                    ("ranged", 11, 13, 0.04985),
                    ("top", None, None, 0.001),
                    ("tail_range", 43, 49, 0.002),
                ],
            },
            "dragon": {
                "target_jump_steps": 13,
                "crash_probability": DRAGON_CRASH_PROBABILITY,
                "jump_distribution": [
                    ("ranged", 5, 8, 0.1491),
                    ("ranged", 9, 10, 0.1988),
                    ("ranged", 11, 12, 0.2485),
                    ("exact", 13, 13, 0.2485),
                    ("ranged", 14, 15, 0.0994),
                    ("ranged", 16, 20, 0.0497),
                    ("top", None, None, 0.002),
                    ("tail_range", 43, 49, 0.004),
                ],
            },
        },
    },
    "100": {
        "total_steps": 100,
        "lambda_crash": 0.101,
        "free_bonus_step_threshold": 10,
        "free_bonus_types": ("mystic", "dragon"),
        "bonuses": {
            "mystic": {
                "target_jump_steps": 15,
                "crash_probability": 0.0,
                "jump_distribution": [
                    ("ranged", 5, 10, 0.1994),
                    ("ranged", 11, 14, 0.2991),
                    ("exact", 15, 15, 0.2991),
                    ("ranged", 16, 20, 0.14955),
                    ("ranged", 21, 25, 0.04985),
                    ("top", None, None, 0.001),
                    ("tail_range", 85, 99, 0.002),
                ],
            },
            "dragon": {
                "target_jump_steps": 25,
                "crash_probability": DRAGON_CRASH_PROBABILITY,
                "jump_distribution": [
                    ("ranged", 10, 15, 0.1491),
                    ("ranged", 16, 20, 0.1988),
                    ("ranged", 21, 24, 0.2485),
                    ("exact", 25, 25, 0.2485),
                    ("ranged", 26, 30, 0.0994),
                    ("ranged", 31, 40, 0.0497),
                    ("top", None, None, 0.002),
                    ("tail_range", 85, 99, 0.004),
                ],
            },
        },
    },
}

DEFAULT_PRESET = "50"
