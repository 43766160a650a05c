"""
Teaching levels: small circuits with goals checked against probe and lamp state.

Each level's `make` builds a fresh circuit through the component factories and
`connect`. Goals only read derived state, so a caller steps the circuit
(``run(circuit, dt, n)``) and then calls ``evaluate(level, circuit)``.
"""

from __future__ import annotations
import math
from typing import Callable, NamedTuple

from .network import Circuit, Component, connect
from .components import (
    R, C, VSource, ISource, Lamp, Ground, Probe,
    LAMP, PROBE_A, PROBE_B,
)


class GoalResult(NamedTuple):
    ok: bool
    value: float
    target: str


class Goal(NamedTuple):
    id: str
    desc: str
    check: Callable[[Circuit], GoalResult]


class Level(NamedTuple):
    id: str
    title: str
    description: str
    make: Callable[[], Circuit]
    goals: tuple[Goal, ...]


def _first(circuit: Circuit, kind: str) -> Component | None:
    for comp in circuit.components:
        if comp.kind == kind:
            return comp
    return None


def probe_value(circuit: Circuit, kind: str = PROBE_A, default: float = 0.0) -> float:
    """Reading of the first probe of the given kind, or default if absent."""
    comp = _first(circuit, kind)
    return comp.state.value if comp is not None else default


def lamp_power(circuit: Circuit, default: float = 0.0) -> float:
    """Power of the first lamp, or default if absent."""
    comp = _first(circuit, LAMP)
    return comp.state.power if comp is not None else default


def _near(kind: str, target: float, tol: float, label: str) -> Callable[[Circuit], GoalResult]:
    def check(circuit: Circuit) -> GoalResult:
        val = probe_value(circuit, kind, math.nan)
        return GoalResult(abs(val - target) < tol, val, label)
    return check


def _ground(circuit: Circuit, *ports) -> Circuit:
    """Add a ground symbol and tie every given port to it."""
    circuit, g = Ground(circuit)
    for p in ports:
        circuit = connect(circuit, p, g.ports[0])
    return circuit


def _series(circuit: Circuit, *components: Component) -> Circuit:
    """Chain components n -> p in order."""
    for a, b in zip(components, components[1:]):
        circuit = connect(circuit, a.ports[1], b.ports[0])
    return circuit


def _voltage_divider() -> Circuit:
    circuit = Circuit()
    circuit, vs = VSource(circuit, 10.0)
    circuit, r1 = R(circuit, 1000.0)
    circuit, r2 = R(circuit, 4000.0)
    circuit, a = Probe(circuit, "A")
    circuit, b = Probe(circuit, "B")
    circuit = connect(circuit, vs.ports[0], r1.ports[0])
    circuit = _series(circuit, r1, r2)
    circuit = connect(circuit, a.ports[0], r1.ports[1])
    circuit = connect(circuit, b.ports[0], vs.ports[0])
    return _ground(circuit, r2.ports[1], vs.ports[1], a.ports[1], b.ports[1])


def _rc_charge() -> Circuit:
    circuit = Circuit()
    circuit, vs = VSource(circuit, 5.0)
    circuit, r = R(circuit, 10000.0)
    circuit, c = C(circuit, 1e-3)
    circuit, a = Probe(circuit, "A")
    circuit = connect(circuit, vs.ports[0], r.ports[0])
    circuit = _series(circuit, r, c)
    circuit = connect(circuit, a.ports[0], c.ports[0])
    return _ground(circuit, c.ports[1], vs.ports[1], a.ports[1])


def _caps_series() -> Circuit:
    circuit = Circuit()
    circuit, vs = VSource(circuit, 10.0)
    circuit, c1 = C(circuit, 8e-3)
    circuit, c2 = C(circuit, 40e-3)
    circuit, a = Probe(circuit, "A")
    circuit, b = Probe(circuit, "B")
    circuit = connect(circuit, vs.ports[0], c1.ports[0])
    circuit = _series(circuit, c1, c2)
    circuit = connect(circuit, a.ports[0], c1.ports[1])
    circuit = connect(circuit, b.ports[0], c1.ports[0])
    return _ground(circuit, c2.ports[1], vs.ports[1], a.ports[1], b.ports[1])


def _current_divider() -> Circuit:
    circuit = Circuit()
    circuit, src = ISource(circuit, 0.01)
    circuit, r1 = R(circuit, 1000.0)
    circuit, r2 = R(circuit, 2000.0)
    circuit, a = Probe(circuit, "A")
    circuit = connect(circuit, src.ports[0], r1.ports[0])
    circuit = connect(circuit, src.ports[0], r2.ports[0])
    circuit = connect(circuit, a.ports[0], r1.ports[0])
    return _ground(circuit, r1.ports[1], r2.ports[1], src.ports[1], a.ports[1])


def _led() -> Circuit:
    circuit = Circuit()
    circuit, vs = VSource(circuit, 9.0)
    circuit, r = R(circuit, 330.0)
    circuit, led = Lamp(circuit, 20.0)  # LED modelled as a low resistance lamp
    circuit, a = Probe(circuit, "A")
    circuit = connect(circuit, vs.ports[0], r.ports[0])
    circuit = _series(circuit, r, led)
    circuit = connect(circuit, a.ports[0], led.ports[0])
    return _ground(circuit, led.ports[1], vs.ports[1], a.ports[1])


def _ohms_law() -> Circuit:
    circuit = Circuit()
    circuit, vs = VSource(circuit, 12.0)
    circuit, r = R(circuit, 2000.0)
    circuit, a = Probe(circuit, "A")
    circuit = connect(circuit, vs.ports[0], r.ports[0])
    circuit = connect(circuit, a.ports[0], r.ports[0])
    return _ground(circuit, r.ports[1], vs.ports[1], a.ports[1])


def _series_resistors() -> Circuit:
    circuit = Circuit()
    circuit, vs = VSource(circuit, 15.0)
    circuit, r1 = R(circuit, 1000.0)
    circuit, r2 = R(circuit, 2000.0)
    circuit, r3 = R(circuit, 1500.0)
    circuit, a = Probe(circuit, "A")
    circuit = connect(circuit, vs.ports[0], r1.ports[0])
    circuit = _series(circuit, r1, r2, r3)
    circuit = connect(circuit, a.ports[0], r2.ports[0])
    return _ground(circuit, r3.ports[1], vs.ports[1], a.ports[1])


def _rc_discharge() -> Circuit:
    circuit = Circuit()
    circuit, c = C(circuit, 2e-3, vprev=10.0)
    circuit, r = R(circuit, 5000.0)
    circuit, a = Probe(circuit, "A")
    circuit = connect(circuit, c.ports[0], r.ports[0])
    circuit = connect(circuit, a.ports[0], c.ports[0])
    return _ground(circuit, r.ports[1], c.ports[1], a.ports[1])


def _parallel_resistors() -> Circuit:
    circuit = Circuit()
    circuit, vs = VSource(circuit, 10.0)
    circuit, r1 = R(circuit, 1000.0)
    circuit, r2 = R(circuit, 1000.0)
    circuit, a = Probe(circuit, "A")
    circuit = connect(circuit, vs.ports[0], r1.ports[0])
    circuit = connect(circuit, vs.ports[0], r2.ports[0])
    circuit = connect(circuit, a.ports[0], r1.ports[0])
    return _ground(circuit, r1.ports[1], r2.ports[1], vs.ports[1], a.ports[1])


def _kvl() -> Circuit:
    circuit = Circuit()
    circuit, vs = VSource(circuit, 12.0)
    circuit, r1 = R(circuit, 2000.0)
    circuit, r2 = R(circuit, 1000.0)
    circuit, a = Probe(circuit, "A")
    circuit, b = Probe(circuit, "B")
    circuit = connect(circuit, vs.ports[0], r1.ports[0])
    circuit = _series(circuit, r1, r2)
    circuit = connect(circuit, a.ports[0], r1.ports[1])
    circuit = connect(circuit, b.ports[0], r1.ports[0])
    return _ground(circuit, r2.ports[1], vs.ports[1], a.ports[1], b.ports[1])


def _power() -> Circuit:
    circuit = Circuit()
    circuit, vs = VSource(circuit, 20.0)
    circuit, r = R(circuit, 400.0)
    circuit, lamp = Lamp(circuit, 100.0)
    circuit, a = Probe(circuit, "A")
    circuit = connect(circuit, vs.ports[0], r.ports[0])
    circuit = _series(circuit, r, lamp)
    circuit = connect(circuit, a.ports[0], lamp.ports[0])
    return _ground(circuit, lamp.ports[1], vs.ports[1], a.ports[1])


def _complex_divider() -> Circuit:
    circuit = Circuit()
    circuit, vs = VSource(circuit, 24.0)
    circuit, r1 = R(circuit, 1000.0)
    circuit, r2 = R(circuit, 2000.0)
    circuit, r3 = R(circuit, 1000.0)
    circuit, a = Probe(circuit, "A")
    circuit, b = Probe(circuit, "B")
    circuit = connect(circuit, vs.ports[0], r1.ports[0])
    circuit = _series(circuit, r1, r2, r3)
    circuit = connect(circuit, a.ports[0], r1.ports[1])
    circuit = connect(circuit, b.ports[0], r2.ports[1])
    return _ground(circuit, r3.ports[1], vs.ports[1], a.ports[1], b.ports[1])


def _b_minus_a(circuit: Circuit) -> GoalResult:
    diff = probe_value(circuit, PROBE_B) - probe_value(circuit, PROBE_A)
    return GoalResult(diff > 0.5, diff, "B - A > 0.5 V")


def _kvl_drop(circuit: Circuit) -> GoalResult:
    drop = probe_value(circuit, PROBE_B) - probe_value(circuit, PROBE_A)
    return GoalResult(abs(drop - 8.0) < 0.5, drop, "8 V ±0.5")


def _lamp_above(threshold: float) -> Callable[[Circuit], GoalResult]:
    def check(circuit: Circuit) -> GoalResult:
        p = lamp_power(circuit)
        return GoalResult(p > threshold, p, f"> {threshold} W")
    return check


def _a_at_least(circuit: Circuit) -> GoalResult:
    val = probe_value(circuit)
    return GoalResult(val >= 3.0, val, ">= 3 V")


def _a_discharged(circuit: Circuit) -> GoalResult:
    val = probe_value(circuit)
    return GoalResult(0.0 < val < 5.0, val, "< 5 V")


LEVELS: tuple[Level, ...] = (
    Level(
        "ohms-01", "Voltage Divider (target: probe A ≈ 2 V, probe B ≈ 8 V)",
        "Learn how voltage divides across resistors in series.",
        _voltage_divider,
        (
            # Starting values put 8 V on A; R1/R2 must be retuned.
            Goal("A2", "Blue probe (A) ≈ 2.0 V", _near(PROBE_A, 2.0, 0.15, "2.0 V ±0.15")),
            Goal("B8", "Green probe (B) ≈ 8.0 V", _near(PROBE_B, 8.0, 0.15, "8.0 V ±0.15")),
        ),
    ),
    Level(
        "cap-01", "RC Charge (watch A climb toward 5 V)",
        "Observe how a capacitor charges through a resistor over time.",
        _rc_charge,
        (Goal("A_at_least_3V", "After a few seconds, A ≥ 3 V", _a_at_least),),
    ),
    Level(
        "caps-series-01", "Capacitors in Series (observe voltage split)",
        "Capacitors in series split voltage inversely to their capacitance.",
        _caps_series,
        (Goal("smaller_cap_higher_V", "Smaller C gets higher V (B > A)", _b_minus_a),),
    ),
    Level(
        "current-div-01", "Current Division with Parallel Resistors",
        "Learn how current divides in parallel resistors.",
        _current_divider,
        (Goal("parallel_voltage", "Measure voltage across parallel resistors",
              _near(PROBE_A, 6.67, 0.5, "~6.67 V")),),
    ),
    Level(
        "led-01", "LED Circuit with Current Limiting",
        "Design a circuit to safely light an LED.",
        _led,
        (Goal("led_lit", "LED is lit (power > 0.1 W)", _lamp_above(0.1)),),
    ),
    Level(
        "ohms-law-01", "Ohms Law Verification",
        "Verify Ohms law: V = I × R",
        _ohms_law,
        (Goal("verify_ohms", "Voltage across 2kΩ should be 12V",
              _near(PROBE_A, 12.0, 0.5, "12 V ±0.5")),),
    ),
    Level(
        "series-resistors", "Series Resistor Addition",
        "Learn how resistances add in series circuits.",
        _series_resistors,
        (Goal("series_voltage", "Measure voltage at junction between R1 and R2",
              _near(PROBE_A, 11.67, 0.5, "~11.67 V")),),
    ),
    Level(
        "rc-discharge", "RC Discharge Circuit",
        "Observe capacitor discharge through a resistor.",
        _rc_discharge,
        (Goal("discharge_target", "Voltage should decay below 5V", _a_discharged),),
    ),
    Level(
        "parallel-resistors", "Parallel Resistance Calculation",
        "Calculate equivalent resistance of parallel resistors.",
        _parallel_resistors,
        (Goal("parallel_equiv", "Voltage should equal source voltage",
              _near(PROBE_A, 10.0, 0.2, "10 V ±0.2")),),
    ),
    Level(
        "kvl-verification", "Kirchhoffs Voltage Law",
        "Verify that voltages around a loop sum to zero.",
        _kvl,
        (Goal("kvl_check", "Sum of voltage drops equals source voltage", _kvl_drop),),
    ),
    Level(
        "power-calc", "Power Calculation in Circuits",
        "Calculate power dissipation in circuit elements.",
        _power,
        (Goal("lamp_power", "Lamp should dissipate significant power", _lamp_above(0.5)),),
    ),
    Level(
        "complex-divider", "Complex Voltage Divider",
        "Master voltage division with multiple taps.",
        _complex_divider,
        (
            Goal("first_tap", "First tap (A) should be 18V", _near(PROBE_A, 18.0, 1.0, "18 V ±1")),
            Goal("second_tap", "Second tap (B) should be 6V", _near(PROBE_B, 6.0, 1.0, "6 V ±1")),
        ),
    ),
)


def get_level(level_id: str) -> Level:
    """Look up a level by id."""
    for level in LEVELS:
        if level.id == level_id:
            return level
    raise KeyError(f"Unknown level: {level_id}")


def evaluate(level: Level, circuit: Circuit) -> dict[str, GoalResult]:
    """Check every goal of a level against the circuit's current state."""
    return {goal.id: goal.check(circuit) for goal in level.goals}
