"""
BMP280 calibration coefficients

Factory-programmed trimming values, read once at sensor bring-up.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict


@dataclass(frozen=True)
class CalibrationCoefficients:
    """
    3 temperature + 9 pressure coefficients.

    dig_T1 and dig_P1 are unsigned 16-bit, all others signed 16-bit.
    """
    dig_t1: int
    dig_t2: int
    dig_t3: int
    dig_p1: int
    dig_p2: int
    dig_p3: int
    dig_p4: int
    dig_p5: int
    dig_p6: int
    dig_p7: int
    dig_p8: int
    dig_p9: int

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)
