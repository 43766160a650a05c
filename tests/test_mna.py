"""
Test: MNA stamping and the dense linear solver in isolation.

Tests:
1. Stamp patterns for resistor, capacitor companion, current and voltage sources
2. Row assignment (nodes first-seen, sources in declaration order)
3. Partial pivoting and singular detection in solve_linear
"""
import pytest
import jax.numpy as jnp


def _close(a, b, tol=1e-12):
    return bool(jnp.all(jnp.abs(jnp.asarray(a) - jnp.asarray(b)) < tol))


class TestStamping:
    """build_mna produces the expected (A, z)."""

    def test_vsource_and_resistor(self):
        from pyohm import Circuit, R, VSource, Ground, connect, build_mna, node_of

        circuit = Circuit()
        circuit, vs = VSource(circuit, 10.0)
        circuit, r1 = R(circuit, 1000.0)
        circuit, g = Ground(circuit)
        circuit = connect(circuit, vs.ports[0], r1.ports[0])
        circuit = connect(circuit, vs.ports[1], g.ports[0])
        circuit = connect(circuit, r1.ports[1], g.ports[0])

        system = build_mna(circuit, 0.02)

        assert system.n_nodes == 1
        assert system.n_total == 2
        assert system.node_index == {node_of(circuit, vs.ports[0]): 0}
        assert system.source_index == {vs.id: 1}
        assert _close(system.A, [[1e-3, 1.0], [1.0, 0.0]])
        assert _close(system.z, [0.0, 10.0])

    def test_floating_resistor_stamp(self):
        from pyohm import Circuit, R, build_mna

        circuit = Circuit()
        circuit, r1 = R(circuit, 500.0)

        system = build_mna(circuit, 0.02)

        g = 1.0 / 500.0
        assert _close(system.A, [[g, -g], [-g, g]])
        assert _close(system.z, [0.0, 0.0])

    def test_capacitor_companion(self):
        from pyohm import Circuit, C, build_mna

        circuit = Circuit()
        circuit, c1 = C(circuit, 1e-3, vprev=2.0)

        system = build_mna(circuit, 0.01)

        geq = 1e-3 / 0.01
        ieq = geq * 2.0
        assert _close(system.A, [[geq, -geq], [-geq, geq]])
        assert _close(system.z, [ieq, -ieq])

    def test_current_source_injection(self):
        from pyohm import Circuit, ISource, Ground, connect, build_mna

        circuit = Circuit()
        circuit, src = ISource(circuit, 0.5)
        circuit, g = Ground(circuit)
        circuit = connect(circuit, src.ports[1], g.ports[0])

        system = build_mna(circuit, 0.01)

        assert system.n_total == 1
        assert _close(system.A, [[0.0]])
        assert _close(system.z, [0.5])

    def test_probe_ground_and_wire_stamp_nothing(self):
        from pyohm import Circuit, Probe, Ground, Wire, build_mna

        circuit = Circuit()
        circuit, _ = Probe(circuit, "A")
        circuit, _ = Ground(circuit)
        circuit, _ = Wire(circuit)

        system = build_mna(circuit, 0.01)

        assert system.n_total == 3  # two probe nodes, one wire node
        assert _close(system.A, jnp.zeros((3, 3)))

    def test_sources_rows_in_declaration_order(self):
        from pyohm import Circuit, VSource, build_mna

        circuit = Circuit()
        circuit, vs1 = VSource(circuit, 1.0)
        circuit, vs2 = VSource(circuit, 2.0)

        system = build_mna(circuit, 0.01)

        assert system.source_index == {vs1.id: 4, vs2.id: 5}
        assert float(system.z[4]) == 1.0
        assert float(system.z[5]) == 2.0

    def test_unknown_kind_rejected(self):
        from pyohm import Circuit, Component, build_mna

        circuit, _ = Circuit().add_component(Component("D1", "diode", ()))
        with pytest.raises(ValueError):
            build_mna(circuit, 0.01)


class TestSolver:
    """solve_linear: Gauss-Jordan with partial pivoting."""

    def test_simple_system(self):
        from pyohm import solve_linear

        A = jnp.array([[2.0, 1.0], [1.0, 3.0]])
        z = jnp.array([3.0, 5.0])

        sol = solve_linear(A, z)

        assert not sol.singular
        assert _close(sol.x, [0.8, 1.4])

    def test_zero_diagonal_needs_pivot(self):
        from pyohm import solve_linear

        A = jnp.array([[0.0, 1.0], [1.0, 0.0]])
        z = jnp.array([2.0, 3.0])

        sol = solve_linear(A, z)

        assert not sol.singular
        assert _close(sol.x, [3.0, 2.0])

    def test_singular_matrix(self):
        from pyohm import solve_linear

        A = jnp.array([[1.0, 2.0], [2.0, 4.0]])
        z = jnp.array([1.0, 2.0])

        sol = solve_linear(A, z)

        assert sol.singular
        assert sol.x is None

    def test_singular_column_before_regular_ones(self):
        """An empty first column is caught even though later pivots are fine."""
        from pyohm import solve_linear

        A = jnp.array([[0.0, 0.0, 0.0], [0.0, 2.0, 1.0], [0.0, 1.0, 3.0]])
        z = jnp.array([1.0, 3.0, 5.0])

        sol = solve_linear(A, z)

        assert sol.singular
        assert sol.x is None

    def test_tolerance_from_config(self):
        from pyohm import solve_linear, SimConfig

        A = jnp.array([[1e-6, 0.0], [0.0, 1.0]])
        z = jnp.array([1e-6, 1.0])

        assert not solve_linear(A, z).singular
        assert solve_linear(A, z, SimConfig(pivot_tolerance=1e-3)).singular

    def test_empty_system(self):
        from pyohm import solve_linear

        sol = solve_linear(jnp.zeros((0, 0)), jnp.zeros(0))

        assert not sol.singular
        assert sol.x.shape == (0,)


class TestConductance:

    def test_ceiling(self):
        from pyohm.config import conductance, SimConfig

        assert conductance(1000.0) == 1e-3
        assert conductance(0.0) == 1e9
        assert conductance(1e-12) == 1e9
        assert conductance(-1e-12) == -1e9
        assert conductance(0.0, SimConfig(max_conductance=1e6)) == 1e6


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
