"""
Result Encoding – Symbols → puyosim URL
=======================================

Responsibilities:
  1. Encode 48 board symbols (row-major, top row first) into a 48-char
     string, and up to 8 queue symbols into an 8-char string padded
     with the empty character.
  2. Decode such strings back into symbols (used to paint synthetic
     layouts).
  3. Assemble the simulator URL ``<base><queue>_<board><options>``.
"""

from __future__ import annotations

from typing import List, Mapping, Sequence

from puyo_vision.models.symbols import (
    BOARD_CELLS,
    QUEUE_LENGTH,
    SYMBOL_TO_CHAR,
    CellSymbol,
)

PUYOSIM_BASE_URL = "https://puyosim.com/new/"
DEFAULT_OPTIONS = "-AAELBB"


class ResultEncoder:
    """Fixed symbol → character mapping.

    Parameters
    ----------
    alphabet : mapping, optional
        Alternative symbol → character table; defaults to the puyosim
        alphabet.
    """

    def __init__(self, alphabet: Mapping[CellSymbol, str] = SYMBOL_TO_CHAR) -> None:
        missing = [s.value for s in CellSymbol if s not in alphabet]
        if missing:
            raise ValueError(f"Alphabet is missing symbols: {missing}")
        self.alphabet = dict(alphabet)
        self.reverse = {c: s for s, c in self.alphabet.items()}

    def encode_board(self, symbols: Sequence[CellSymbol]) -> str:
        """Encode exactly 48 board symbols in row-major order."""
        if len(symbols) != BOARD_CELLS:
            raise ValueError(f"Expected {BOARD_CELLS} board symbols, got {len(symbols)}")
        return "".join(self.alphabet[s] for s in symbols)

    def encode_queue(self, symbols: Sequence[CellSymbol]) -> str:
        """Encode queue symbols left to right, padding with ``none``."""
        if len(symbols) > QUEUE_LENGTH:
            raise ValueError(f"Expected at most {QUEUE_LENGTH} queue symbols, got {len(symbols)}")
        padded = list(symbols) + [CellSymbol.NONE] * (QUEUE_LENGTH - len(symbols))
        return "".join(self.alphabet[s] for s in padded)

    def decode(self, text: str) -> List[CellSymbol]:
        """Parse an encoded string back into symbols."""
        try:
            return [self.reverse[ch] for ch in text]
        except KeyError as exc:
            raise ValueError(f"Unknown cell character {exc.args[0]!r} in {text!r}") from None


def decode_cells(text: str) -> List[CellSymbol]:
    """Decode with the default alphabet."""
    return _DEFAULT_ENCODER.decode(text)


def build_url(
    queue: str,
    board: str,
    base_url: str = PUYOSIM_BASE_URL,
    options: str = DEFAULT_OPTIONS,
) -> str:
    """Return the simulator link for an encoded queue and board."""
    return f"{base_url}{queue}_{board}{options}"


def format_board(board: str, cols: int = 8) -> List[str]:
    """Split a board string into printable rows (top row first)."""
    return [board[i:i + cols] for i in range(0, len(board), cols)]


_DEFAULT_ENCODER = ResultEncoder()
