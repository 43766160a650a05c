"""Circuit component factory functions (functional style)."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, NamedTuple

from .network import Circuit, Component, Port, GND, fresh_label


RESISTOR = "resistor"
CAPACITOR = "capacitor"
VSOURCE = "vsource"
ISOURCE = "isource"
GROUND = "ground"
LAMP = "lamp"
PROBE_A = "probeA"
PROBE_B = "probeB"
WIRE = "wire"


# Parameter records (one per kind that has parameters)

class ResistorParams(NamedTuple):
    resistance: float  # Ohms


class CapacitorParams(NamedTuple):
    capacitance: float  # Farads


class VSourceParams(NamedTuple):
    voltage: float  # Volts, terminal 0 relative to terminal 1


class ISourceParams(NamedTuple):
    current: float  # Amperes injected into terminal 0's node


class LampParams(NamedTuple):
    resistance: float  # Ohms


# Mutable state records, rewritten after each successful step

@dataclass
class CapacitorState:
    vprev: float = 0.0  # terminal voltage from the last solved step


@dataclass
class LampState:
    power: float = 0.0  # dissipated power in Watts


@dataclass
class ProbeState:
    value: float = 0.0  # measured terminal voltage difference


def _make(
    circuit: Circuit,
    kind: str,
    prefix: str,
    port_names: tuple[str, ...],
    params: Any = None,
    state: Any = None,
    name: str | None = None,
) -> tuple[Circuit, Component]:
    comp_id = name or fresh_label(prefix)
    ports = []
    shared = None  # wires put both ends on one node
    for port_name in port_names:
        if kind == GROUND:
            slot = 0
        elif shared is not None:
            slot = shared
        else:
            circuit, slot = circuit.new_node()
            if kind == WIRE:
                shared = slot
        ports.append(Port(f"{comp_id}.{port_name}", comp_id, port_name, slot))
    comp = Component(comp_id, kind, tuple(ports), params, state)
    return circuit.add_component(comp)


def R(
    circuit: Circuit,
    value: float = 1000.0,
    *,
    name: str | None = None,
) -> tuple[Circuit, Component]:
    """
    Create a resistor with two fresh, unconnected terminals.

    Args:
        circuit: Circuit to add to
        value: Resistance in Ohms
        name: Component id (generated if omitted)

    Returns:
        (new_circuit, component)

    Example:
        circuit, r1 = R(circuit, 1000.0)  # 1 kΩ
    """
    return _make(circuit, RESISTOR, "R", ("p", "n"), ResistorParams(value), name=name)


def C(
    circuit: Circuit,
    value: float = 1e-3,
    *,
    name: str | None = None,
    vprev: float = 0.0,
) -> tuple[Circuit, Component]:
    """
    Create a capacitor.

    Args:
        circuit: Circuit to add to
        value: Capacitance in Farads
        name: Component id (generated if omitted)
        vprev: Initial voltage (terminal p minus terminal n), for pre-charged caps

    Returns:
        (new_circuit, component)
    """
    return _make(
        circuit, CAPACITOR, "C", ("p", "n"),
        CapacitorParams(value), CapacitorState(vprev), name=name,
    )


def VSource(
    circuit: Circuit,
    value: float = 5.0,
    *,
    name: str | None = None,
) -> tuple[Circuit, Component]:
    """
    Create an ideal voltage source.

    Enforces V(+) - V(-) = value and adds one branch current unknown.
    """
    return _make(circuit, VSOURCE, "VS", ("+", "-"), VSourceParams(value), name=name)


def ISource(
    circuit: Circuit,
    value: float = 0.01,
    *,
    name: str | None = None,
) -> tuple[Circuit, Component]:
    """Create an ideal current source pushing `value` Amperes into terminal p's node."""
    return _make(circuit, ISOURCE, "IS", ("p", "n"), ISourceParams(value), name=name)


def Lamp(
    circuit: Circuit,
    value: float = 100.0,
    *,
    name: str | None = None,
) -> tuple[Circuit, Component]:
    """Create a lamp: a resistive load that reports its dissipated power."""
    return _make(
        circuit, LAMP, "L", ("p", "n"),
        LampParams(value), LampState(), name=name,
    )


def Ground(circuit: Circuit, *, name: str | None = None) -> tuple[Circuit, Component]:
    """Create a ground reference. Its single port sits on GND from the start."""
    return _make(circuit, GROUND, "G", ("g",), name=name)


def Probe(
    circuit: Circuit,
    channel: str = "A",
    *,
    name: str | None = None,
) -> tuple[Circuit, Component]:
    """
    Create an ideal voltmeter (infinite input impedance).

    Args:
        channel: "A" or "B"

    The probe's reading is V(+) - V(-) after each successful step.
    """
    if channel not in ("A", "B"):
        raise ValueError(f"Probe channel must be 'A' or 'B', got {channel!r}")
    kind = PROBE_A if channel == "A" else PROBE_B
    return _make(circuit, kind, kind.upper(), ("+", "-"), None, ProbeState(), name=name)


def Wire(circuit: Circuit, *, name: str | None = None) -> tuple[Circuit, Component]:
    """
    Create a wire.

    Both ends share one node from the start, so connecting them to other
    ports shorts those ports together. A wire never stamps anything.
    """
    return _make(circuit, WIRE, "W", ("a", "b"), name=name)


__all__ = [
    "GND",
    "RESISTOR", "CAPACITOR", "VSOURCE", "ISOURCE", "GROUND",
    "LAMP", "PROBE_A", "PROBE_B", "WIRE",
    "ResistorParams", "CapacitorParams", "VSourceParams", "ISourceParams", "LampParams",
    "CapacitorState", "LampState", "ProbeState",
    "R", "C", "VSource", "ISource", "Lamp", "Ground", "Probe", "Wire",
]
