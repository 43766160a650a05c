"""
Test: Reproducibility.

Two simulate calls on identical circuit snapshots with the same dt must give
identical voltage and current maps, and the matrix is rebuilt from the current
topology on every step.
"""
import copy
import pytest


def build_circuit():
    from pyohm import Circuit, R, C, VSource, ISource, Ground, connect

    circuit = Circuit()
    circuit, vs = VSource(circuit, 9.0)
    circuit, r1 = R(circuit, 330.0)
    circuit, r2 = R(circuit, 1200.0)
    circuit, c1 = C(circuit, 4.7e-4)
    circuit, src = ISource(circuit, 2e-3)
    circuit, g = Ground(circuit)
    circuit = connect(circuit, vs.ports[0], r1.ports[0])
    circuit = connect(circuit, r1.ports[1], r2.ports[0])
    circuit = connect(circuit, r2.ports[1], c1.ports[0])
    circuit = connect(circuit, src.ports[0], r2.ports[1])
    for p in (vs.ports[1], c1.ports[1], src.ports[1]):
        circuit = connect(circuit, p, g.ports[0])
    return circuit


def test_identical_snapshots_give_identical_results():
    from pyohm import simulate_step, run

    circuit = build_circuit()
    run(circuit, 0.01, 5)

    twin = copy.deepcopy(circuit)
    a = simulate_step(circuit, 0.01)
    b = simulate_step(twin, 0.01)

    assert a.node_voltages == b.node_voltages
    assert a.source_currents == b.source_currents
    assert [c.state for c in circuit.components] == [c.state for c in twin.components]


def test_repeated_runs_match():
    from pyohm import run

    first = build_circuit()
    second = copy.deepcopy(first)

    results_a = run(first, 0.005, 30)
    results_b = run(second, 0.005, 30)

    assert results_a == results_b


def test_stepping_derived_circuit_leaves_snapshot_alone():
    """A circuit derived by adding a probe steps on its own copy of the state."""
    from pyohm import Probe, connect, simulate_step, state_of

    snapshot = build_circuit()
    c1 = next(c for c in snapshot.components if c.kind == "capacitor")

    circuit, a = Probe(snapshot, "A")
    circuit = connect(circuit, a.ports[0], c1.ports[0])
    circuit = connect(circuit, a.ports[1], c1.ports[1])
    result = simulate_step(circuit, 0.01)

    assert not result.singular
    assert state_of(circuit, c1).vprev > 0.0
    assert state_of(circuit, a).value == state_of(circuit, c1).vprev
    assert state_of(snapshot, c1).vprev == 0.0

    # The snapshot still steps as if the derived circuit never ran
    twin = copy.deepcopy(snapshot)
    assert simulate_step(snapshot, 0.01).node_voltages == simulate_step(twin, 0.01).node_voltages


def test_topology_change_between_steps():
    """Adding a parallel load between steps is picked up on the next step."""
    from pyohm import Circuit, R, VSource, Ground, connect, simulate_step, port_voltage

    circuit = Circuit()
    circuit, vs = VSource(circuit, 10.0)
    circuit, r1 = R(circuit, 1000.0)
    circuit, r2 = R(circuit, 1000.0)
    circuit, g = Ground(circuit)
    circuit = connect(circuit, vs.ports[0], r1.ports[0])
    circuit = connect(circuit, r1.ports[1], r2.ports[0])
    circuit = connect(circuit, r2.ports[1], g.ports[0])
    circuit = connect(circuit, vs.ports[1], g.ports[0])

    before = simulate_step(circuit, 0.01)
    assert abs(port_voltage(before, circuit, r2.ports[0]) - 5.0) < 1e-9

    circuit, r3 = R(circuit, 1000.0)
    circuit = connect(circuit, r3.ports[0], r2.ports[0])
    circuit = connect(circuit, r3.ports[1], g.ports[0])

    after = simulate_step(circuit, 0.01)
    assert abs(port_voltage(after, circuit, r2.ports[0]) - 10.0 / 3.0) < 1e-9


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
