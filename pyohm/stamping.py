"""
MNA matrix assembly for one simulation step.

The system is rebuilt from the current topology on every call:

    [ G  B ] [ v ]   [ i ]
    [ B' 0 ] [ j ] = [ e ]

v holds the N non-ground node potentials, j the M voltage source branch
currents. Capacitors use the backward-Euler companion model
(Geq = C/dt in parallel with Ieq = Geq * vprev).
"""

from __future__ import annotations
from typing import NamedTuple

import jax.numpy as jnp
from jax import Array

from .config import SimConfig, DEFAULT_CONFIG, conductance
from .network import Circuit, GND, list_nodes
from .components import (
    RESISTOR, CAPACITOR, VSOURCE, ISOURCE, GROUND, LAMP, PROBE_A, PROBE_B, WIRE,
)


class MnaSystem(NamedTuple):
    """Stamped linear system A x = z plus the row bookkeeping needed to read x."""
    A: Array                     # (n_total, n_total)
    z: Array                     # (n_total,)
    node_index: dict[str, int]   # node label -> row, ground excluded
    source_index: dict[str, int] # voltage source id -> branch row
    n_nodes: int
    n_total: int


def _stamp_conductance(A: list[list[float]], i: int | None, j: int | None, g: float) -> None:
    """
    Resistor-style stamp between rows i and j (None = ground).

    A[i, i] += g
    A[j, j] += g
    A[i, j] -= g
    A[j, i] -= g
    """
    if i is not None:
        A[i][i] += g
    if j is not None:
        A[j][j] += g
    if i is not None and j is not None:
        A[i][j] -= g
        A[j][i] -= g


def _inject(z: list[float], i: int | None, j: int | None, current: float) -> None:
    """Current injection: +current into node i, -current into node j."""
    if i is not None:
        z[i] += current
    if j is not None:
        z[j] -= current


def _stamp_vsource(A: list[list[float]], i: int | None, j: int | None, row: int) -> None:
    """
    Voltage source coupling for branch row `row`.

    A[i, row] += 1, A[row, i] += 1
    A[j, row] -= 1, A[row, j] -= 1
    """
    if i is not None:
        A[i][row] += 1.0
        A[row][i] += 1.0
    if j is not None:
        A[j][row] -= 1.0
        A[row][j] -= 1.0


def build_mna(circuit: Circuit, dt: float, config: SimConfig = DEFAULT_CONFIG) -> MnaSystem:
    """
    Stamp every component of the circuit for a step of length dt.

    Args:
        circuit: Circuit snapshot (topology and capacitor memory are read only)
        dt: Timestep in seconds, must be > 0
        config: Numerical settings (conductance ceiling)

    Returns:
        MnaSystem ready for solve_linear
    """
    nodes = list_nodes(circuit)
    n_nodes = len(nodes)
    node_index = {label: k for k, label in enumerate(nodes)}

    # Voltage sources get branch rows in declaration order
    source_index = {}
    for comp in circuit.components:
        if comp.kind == VSOURCE:
            source_index[comp.id] = n_nodes + len(source_index)
    n_total = n_nodes + len(source_index)

    # Stamps accumulate on the host; one transfer builds the device arrays
    A = [[0.0] * n_total for _ in range(n_total)]
    z = [0.0] * n_total

    def idx(port) -> int | None:
        label = circuit.nets.label(port.slot)
        return None if label == GND else node_index[label]

    for comp in circuit.components:
        kind = comp.kind

        if kind in (RESISTOR, LAMP):
            i, j = idx(comp.ports[0]), idx(comp.ports[1])
            g = conductance(comp.params.resistance, config)
            _stamp_conductance(A, i, j, g)

        elif kind == CAPACITOR:
            i, j = idx(comp.ports[0]), idx(comp.ports[1])
            geq = comp.params.capacitance / dt
            ieq = geq * comp.state.vprev
            _stamp_conductance(A, i, j, geq)
            _inject(z, i, j, ieq)

        elif kind == ISOURCE:
            i, j = idx(comp.ports[0]), idx(comp.ports[1])
            _inject(z, i, j, comp.params.current)

        elif kind == VSOURCE:
            i, j = idx(comp.ports[0]), idx(comp.ports[1])
            row = source_index[comp.id]
            _stamp_vsource(A, i, j, row)
            z[row] = comp.params.voltage

        elif kind in (GROUND, PROBE_A, PROBE_B, WIRE):
            # Reference, ideal voltmeters and shorts contribute no equations
            continue

        else:
            raise ValueError(f"Unknown component kind: {kind}")

    return MnaSystem(
        A=jnp.asarray(A, dtype=jnp.float64).reshape((n_total, n_total)),
        z=jnp.asarray(z, dtype=jnp.float64),
        node_index=node_index,
        source_index=source_index,
        n_nodes=n_nodes,
        n_total=n_total,
    )
