from .charset import SEGMENT_MASKS, char_to_mask
from .ht16k33 import SegmentDisplay, encode_cells, encode_frame, setup_commands


__all__ = [
    "SEGMENT_MASKS",
    "char_to_mask",
    "SegmentDisplay",
    "encode_cells",
    "encode_frame",
    "setup_commands",
]
