"""16-bit SPN block cipher and its modes of operation.

Research / education only. Do NOT use in production.
"""

from .sbox import FieldSBox
from .permutation import BitPermutation, DEFAULT_PERMUTATION, PLANCK_DIGITS
from .key_schedule import KeySchedule, NUM_ROUNDS
from .core import BlockCipher, SPNCipher
from .modes import BlockMode, CBCMode, CTRMode, ECBMode, ModeResult, build_mode

__all__ = [
    "FieldSBox",
    "BitPermutation",
    "DEFAULT_PERMUTATION",
    "PLANCK_DIGITS",
    "KeySchedule",
    "NUM_ROUNDS",
    "BlockCipher",
    "SPNCipher",
    "BlockMode",
    "ECBMode",
    "CBCMode",
    "CTRMode",
    "ModeResult",
    "build_mode",
]
