"""
Example: RC Charging and Fail-Soft Stepping

A 5 V source charges a 1 mF capacitor through 10 kOhm (tau = 10 s), stepped
at a fixed 20 ms cadence like an interactive timer would. Halfway through, a
floating resistor is dropped into the circuit: those steps report zeros and
the capacitor keeps its charge until the resistor is removed again.

Components used: R, C, VSource, Probe, Ground
"""
from pyohm import (
    Circuit, R, C, VSource, Ground, Probe,
    connect, simulate_step, remove_component, state_of,
)


def build_rc(V=5.0, R_val=10000.0, C_val=1e-3):
    """Vs -- R -- C -- GND, probe A across C."""
    circuit = Circuit()
    circuit, vs = VSource(circuit, V)
    circuit, r1 = R(circuit, R_val)
    circuit, c1 = C(circuit, C_val)
    circuit, a = Probe(circuit, "A")
    circuit, g = Ground(circuit)

    circuit = connect(circuit, vs.ports[0], r1.ports[0])
    circuit = connect(circuit, r1.ports[1], c1.ports[0])
    circuit = connect(circuit, a.ports[0], c1.ports[0])
    for p in (c1.ports[1], vs.ports[1], a.ports[1]):
        circuit = connect(circuit, p, g.ports[0])
    return circuit, c1, a


def main():
    dt = 0.02
    circuit, c1, a = build_rc()

    print("=" * 60)
    print("RC Charge Example (tau = 10 s, dt = 20 ms)")
    print("=" * 60)
    print(f"{'t [s]':>8} {'probe A [V]':>12} {'singular':>9}")

    t = 0.0
    floating = None
    for k in range(1, 1001):
        if k == 400:
            circuit, floating = R(circuit, 1000.0)
        elif k == 450:
            circuit = remove_component(circuit, floating.id)

        result = simulate_step(circuit, dt)
        t += dt
        if k % 50 == 0:
            print(f"{t:8.2f} {state_of(circuit, a).value:12.4f} {str(result.singular):>9}")

    print(f"\nFinal capacitor voltage: {state_of(circuit, c1).vprev:.4f} V")
    print("=" * 60)


if __name__ == "__main__":
    main()
