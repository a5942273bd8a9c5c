from dataclasses import dataclass
import math


@dataclass(frozen=True)
class Deviation:
    """Allowed mass error: the larger of a relative (ppm) and an absolute (Da) bound."""
    ppm: float
    absolute: float = 0.0

    def __post_init__(self):
        if not (math.isfinite(self.ppm) and self.ppm >= 0):
            raise ValueError(f"Invalid ppm: {self.ppm}")
        if not (math.isfinite(self.absolute) and self.absolute >= 0):
            raise ValueError(f"Invalid absolute deviation: {self.absolute}")

    def absolute_for(self, mz: float) -> float:
        return max(self.ppm * mz * 1e-6, self.absolute)

    def in_error_window(self, center: float, value: float) -> bool:
        return abs(center - value) <= self.absolute_for(center)
