"""
14-segment character table for the HT16K33 alphanumeric display.

Each character maps to a 16-bit segment mask. Characters missing from the
table render as space.
"""

from types import MappingProxyType
from typing import Mapping

DEFAULT_CHAR = " "

SEGMENT_MASKS: Mapping[str, int] = MappingProxyType({
    " ": 0x0000,
    "!": 0x0640,
    "&": 0x235D,
    "(": 0x2400,
    ")": 0x0900,
    "0": 0x0C3F,
    "1": 0x0006,
    "2": 0x00DB,
    "3": 0x008F,
    "4": 0x00E6,
    "5": 0x2069,
    "6": 0x00FD,
    "7": 0x0007,
    "8": 0x00FF,
    "9": 0x00EF,
    "?": 0x60A3,
    "@": 0x02BB,
    "A": 0x00F7,
    "B": 0x128F,
    "C": 0x0039,
    "D": 0x120F,
    "E": 0x00F9,
    "F": 0x0071,
    "G": 0x00BD,
    "H": 0x00F6,
    "I": 0x1200,
    "J": 0x001E,
    "K": 0x2470,
    "L": 0x0038,
    "M": 0x0536,
    "N": 0x2136,
    "O": 0x003F,
    "P": 0x00F3,
    "Q": 0x203F,
    "R": 0x20F3,
    "S": 0x00ED,
    "T": 0x1201,
    "U": 0x003E,
    "V": 0x0C30,
    "W": 0x2836,
    "X": 0x2D00,
    "Y": 0x1500,
    "Z": 0x0C09,
    "a": 0x1058,
    "b": 0x2078,
    "c": 0x00D8,
    "d": 0x088E,
    "e": 0x0858,
    "f": 0x0071,
    "g": 0x048E,
    "h": 0x1070,
    "i": 0x1000,
    "j": 0x000E,
    "k": 0x3600,
    "l": 0x0030,
    "m": 0x10D4,
    "n": 0x1050,
    "o": 0x00DC,
    "p": 0x0170,
    "q": 0x0486,
    "r": 0x0050,
    "s": 0x2088,
    "t": 0x0078,
    "u": 0x001C,
    "v": 0x2004,
    "w": 0x2814,
    "x": 0x28C0,
    "y": 0x200C,
    "z": 0x0848,
})


def char_to_mask(char: str) -> int:
    return SEGMENT_MASKS.get(char, SEGMENT_MASKS[DEFAULT_CHAR])
