"""
Simulation settings shared by the stamper, solver and propagator.

Importing this module (and so importing pyohm) turns on JAX's 64-bit mode
process-wide via ``jax_enable_x64``. Other JAX code in the same process will
see float64 defaults as well.
"""

from __future__ import annotations
from typing import NamedTuple

import jax

# Absolute pivot tolerances near 1e-12 are meaningless in float32.
jax.config.update("jax_enable_x64", True)


class SimConfig(NamedTuple):
    """
    Numerical knobs for one simulation step.

    Attributes:
        pivot_tolerance: Pivots with smaller magnitude mark the system singular
        max_conductance: Ceiling applied to 1/R (stands in for R = 0)
    """
    pivot_tolerance: float = 1e-12
    max_conductance: float = 1e9


DEFAULT_CONFIG = SimConfig()


def conductance(resistance: float, config: SimConfig = DEFAULT_CONFIG) -> float:
    """
    Conductance of a resistive branch, clamped to the configured ceiling.

    A zero resistance yields max_conductance instead of dividing by zero.
    """
    ceiling = config.max_conductance
    if resistance == 0:
        return ceiling
    g = 1.0 / resistance
    if abs(g) > ceiling:
        return ceiling if g > 0 else -ceiling
    return g
