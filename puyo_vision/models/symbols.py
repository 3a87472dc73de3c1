"""
Cell Symbols – Canonical Category List & Alphabet
=================================================

The puyosim URL encodes every cell as a single case-significant letter.
The alphabet below is a stable external contract: changing a letter
breaks every link ever generated.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict


class CellSymbol(str, Enum):
    """Every category a board or queue cell can be classified as."""

    NONE = "none"
    RED = "red"
    BLUE = "blue"
    YELLOW = "yellow"
    GREEN = "green"
    PURPLE = "purple"
    HEART = "heart"
    RED_PLUS = "red_plus"
    BLUE_PLUS = "blue_plus"
    YELLOW_PLUS = "yellow_plus"
    GREEN_PLUS = "green_plus"
    PURPLE_PLUS = "purple_plus"

    @property
    def is_plus(self) -> bool:
        return self.value.endswith("_plus")

    def plus_variant(self) -> "CellSymbol":
        """Return the glossy "+" variant; heart and none have none."""
        if self in (CellSymbol.NONE, CellSymbol.HEART) or self.is_plus:
            raise ValueError(f"{self.value} has no plus variant")
        return CellSymbol(f"{self.value}_plus")


# Symbol → URL character
SYMBOL_TO_CHAR: Dict[CellSymbol, str] = {
    CellSymbol.NONE: "A",
    CellSymbol.RED: "B",
    CellSymbol.BLUE: "C",
    CellSymbol.YELLOW: "D",
    CellSymbol.GREEN: "E",
    CellSymbol.PURPLE: "F",
    CellSymbol.HEART: "G",
    CellSymbol.RED_PLUS: "R",
    CellSymbol.BLUE_PLUS: "S",
    CellSymbol.YELLOW_PLUS: "T",
    CellSymbol.GREEN_PLUS: "U",
    CellSymbol.PURPLE_PLUS: "V",
}

BOARD_ROWS: int = 6
BOARD_COLS: int = 8
BOARD_CELLS: int = BOARD_ROWS * BOARD_COLS
QUEUE_LENGTH: int = 8
