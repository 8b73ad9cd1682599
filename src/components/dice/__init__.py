"""
Dice component - rolling the die and creating checkpoints.
"""

from .component import run_dice_history, run_roll_dice
from .models import DiceHistoryOutput, RollDiceInput, RollDiceOutput

__all__ = [
    "run_roll_dice",
    "run_dice_history",
    "RollDiceInput",
    "RollDiceOutput",
    "DiceHistoryOutput",
]
