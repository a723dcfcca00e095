"""Noise mechanisms and norms used for privacy accounting."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class NormType(enum.Enum):
    """Norm used to measure the individual sensitivity of a report."""

    L1 = "l1"
    L2 = "l2"


@dataclass(frozen=True)
class LaplaceNoise:
    """Laplace noise with scale ``b``, i.e. ``Lap(b)``."""

    scale: float