"""
Per-step simulation: build the MNA system, solve it, and write derived state
back onto the circuit's components.

A singular system (floating node, no path to ground, conflicting voltage
sources) is not an error: the step reports all-zero voltages and currents and
leaves every component's state exactly as it was.
"""

from __future__ import annotations
import logging
from typing import NamedTuple

from .config import SimConfig, DEFAULT_CONFIG, conductance
from .network import Circuit, Port, GND, node_of
from .stamping import build_mna
from .solver import solve_linear
from .components import (
    RESISTOR, CAPACITOR, VSOURCE, ISOURCE, GROUND, LAMP, PROBE_A, PROBE_B, WIRE,
)

logger = logging.getLogger(__name__)


class StepResult(NamedTuple):
    """Voltages and voltage source currents produced by one step."""
    node_voltages: dict[str, float]    # node label -> potential, ground excluded
    source_currents: dict[str, float]  # voltage source id -> MNA branch current
    singular: bool = False

    def v(self, node: str) -> float:
        """Potential of a node label (0.0 for ground)."""
        if node == GND:
            return 0.0
        return self.node_voltages[node]


def _port_voltage(volts: dict[str, float], circuit: Circuit, port: Port) -> float:
    return volts.get(circuit.nets.label(port.slot), 0.0)


def simulate_step(circuit: Circuit, dt: float, config: SimConfig = DEFAULT_CONFIG) -> StepResult:
    """
    Advance the circuit by one timestep.

    Capacitor memory, lamp power and probe readings are updated in place on
    success and untouched on a singular solve. dt must be finite and positive;
    it is not checked here.

    Args:
        circuit: Circuit to simulate
        dt: Timestep in seconds
        config: Numerical settings

    Returns:
        StepResult
    """
    system = build_mna(circuit, dt, config)
    solution = solve_linear(system.A, system.z, config)

    if solution.singular:
        logger.debug(
            "Step skipped: singular system with %d nodes and %d sources",
            system.n_nodes, len(system.source_index),
        )
        return StepResult(
            node_voltages={label: 0.0 for label in system.node_index},
            source_currents={cid: 0.0 for cid in system.source_index},
            singular=True,
        )

    x = [float(val) for val in solution.x.tolist()]
    volts = {label: x[k] for label, k in system.node_index.items()}
    currents = {cid: x[k] for cid, k in system.source_index.items()}

    for comp in circuit.components:
        kind = comp.kind
        if kind in (CAPACITOR, LAMP, PROBE_A, PROBE_B):
            v = (_port_voltage(volts, circuit, comp.ports[0])
                 - _port_voltage(volts, circuit, comp.ports[1]))
            if kind == CAPACITOR:
                comp.state.vprev = v
            elif kind == LAMP:
                comp.state.power = v * v * conductance(comp.params.resistance, config)
            else:
                comp.state.value = v
        elif kind not in (RESISTOR, VSOURCE, ISOURCE, GROUND, WIRE):
            raise ValueError(f"Unknown component kind: {kind}")

    return StepResult(node_voltages=volts, source_currents=currents)


def run(
    circuit: Circuit,
    dt: float,
    n_steps: int,
    config: SimConfig = DEFAULT_CONFIG,
) -> list[StepResult]:
    """
    Step the circuit n_steps times at a fixed dt (headless driver).

    Returns:
        One StepResult per step, in order
    """
    return [simulate_step(circuit, dt, config) for _ in range(n_steps)]


def port_voltage(result: StepResult, circuit: Circuit, port: Port | str) -> float:
    """Potential at a port's node in a step result."""
    return result.v(node_of(circuit, port))
