"""PyOhm - JAX-backed step simulator for lumped circuits.

Circuits are built functionally from component factories and `connect`, then
advanced one timestep at a time using Modified Nodal Analysis (MNA) with a
backward-Euler companion model for capacitors.

Importing pyohm enables JAX 64-bit mode (``jax_enable_x64``) for the whole
process: the solver's absolute pivot tolerance needs float64.

Usage:
    from pyohm import Circuit, R, VSource, Ground, Probe, connect, simulate_step
"""

from .config import SimConfig, DEFAULT_CONFIG
from .network import (
    GND,
    Port,
    Component,
    NetTable,
    Circuit,
    connect,
    list_nodes,
    node_of,
    find_port,
    get_component,
    state_of,
    remove_component,
    update_params,
)
from .components import R, C, VSource, ISource, Lamp, Ground, Probe, Wire
from .stamping import MnaSystem, build_mna
from .solver import LinearSolution, solve_linear
from .simulator import StepResult, simulate_step, run, port_voltage

__version__ = "0.1.0"
__all__ = [
    # Configuration
    "SimConfig",
    "DEFAULT_CONFIG",
    # Topology
    "GND",
    "Port",
    "Component",
    "NetTable",
    "Circuit",
    "connect",
    "list_nodes",
    "node_of",
    "find_port",
    "get_component",
    "state_of",
    "remove_component",
    "update_params",
    # Components
    "R",
    "C",
    "VSource",
    "ISource",
    "Lamp",
    "Ground",
    "Probe",
    "Wire",
    # Engine
    "MnaSystem",
    "build_mna",
    "LinearSolution",
    "solve_linear",
    "StepResult",
    "simulate_step",
    "run",
    "port_voltage",
    "__version__",
]
