"""
Example: Voltage Divider

Demonstrates the voltage divider rule: V_out = V_in * R2 / (R1 + R2)

Two examples:
1. Simple 2-resistor divider read through a probe
2. The same divider with R1 shorted (0 Ohm handled by the conductance ceiling)

Components used: R, VSource, Probe, Ground
"""
from pyohm import (
    Circuit, R, VSource, Ground, Probe,
    connect, simulate_step, update_params, state_of,
)


def build_divider(V_in=10.0, R1=1000.0, R2=4000.0):
    """Build a simple 2-resistor voltage divider.

    Circuit:
        Vs ---[R1]---+---[R2]--- GND
                     |
                  probe A
    """
    circuit = Circuit()
    circuit, vs = VSource(circuit, V_in)
    circuit, r1 = R(circuit, R1)
    circuit, r2 = R(circuit, R2)
    circuit, a = Probe(circuit, "A")
    circuit, g = Ground(circuit)

    circuit = connect(circuit, vs.ports[0], r1.ports[0])
    circuit = connect(circuit, r1.ports[1], r2.ports[0])
    circuit = connect(circuit, a.ports[0], r2.ports[0])
    for p in (r2.ports[1], vs.ports[1], a.ports[1]):
        circuit = connect(circuit, p, g.ports[0])

    return circuit, {"vs": vs, "R1": r1, "R2": r2, "A": a}


def main():
    print("=" * 60)
    print("Voltage Divider Example")
    print("=" * 60)

    V_in, R1, R2 = 10.0, 1000.0, 4000.0

    print("\n1. Simple Voltage Divider (R1=1k, R2=4k)")
    print("-" * 40)
    circuit, parts = build_divider(V_in, R1, R2)
    result = simulate_step(circuit, dt=0.02)
    expected = V_in * R2 / (R1 + R2)
    print(f"   Input voltage:    {V_in:.2f} V")
    print(f"   Probe A:          {state_of(circuit, parts['A']).value:.4f} V")
    print(f"   Expected:         {expected:.4f} V")
    print(f"   Source current:   {result.source_currents[parts['vs'].id] * 1e3:.4f} mA")

    print("\n2. R1 shorted (0 Ohm)")
    print("-" * 40)
    circuit = update_params(circuit, parts["R1"].id, resistance=0.0)
    simulate_step(circuit, dt=0.02)
    print(f"   Probe A:          {state_of(circuit, parts['A']).value:.6f} V (expected: ~{V_in:.2f})")

    print("\n" + "=" * 60)


if __name__ == "__main__":
    main()
