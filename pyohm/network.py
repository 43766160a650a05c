"""Circuit topology: ports, components and node groups (immutable/functional style)."""

from __future__ import annotations
import dataclasses
from itertools import count
from typing import Any, NamedTuple, TYPE_CHECKING

if TYPE_CHECKING:
    from .config import SimConfig
    from .simulator import StepResult


GND = "GND"

_label_counter = count(1)


def fresh_label(prefix: str = "N") -> str:
    """Return a process-wide unique label such as ``N_17``."""
    return f"{prefix}_{next(_label_counter)}"


class Port(NamedTuple):
    """A terminal of a component."""
    id: str
    component: str  # owning component id
    name: str       # terminal name ("p", "n", "+", "-", "g", "a", "b")
    slot: int       # node slot in the circuit's NetTable (0 = ground)


class Component(NamedTuple):
    """
    A circuit element.

    params is the kind-specific parameter record (None for ground, probes and
    wires). state is the kind-specific mutable record updated after each
    successful step (None for kinds without derived readings).
    """
    id: str
    kind: str
    ports: tuple[Port, ...]
    params: Any = None
    state: Any = None


def _fork(components: tuple[Component, ...]) -> tuple[Component, ...]:
    """Copy every state record so a derived circuit steps independently."""
    return tuple(
        c if c.state is None else c._replace(state=dataclasses.replace(c.state))
        for c in components
    )


class NetTable(NamedTuple):
    """
    Union-find arena of node slots.

    Slot 0 is ground and is always the root of its group, so ground absorbs
    every group it is merged with. Other groups are merged by rank; on a tie
    the first argument's root survives.
    """
    labels: tuple[str, ...] = (GND,)
    parent: tuple[int, ...] = (0,)
    rank: tuple[int, ...] = (0,)

    def add_slot(self, label: str) -> tuple[NetTable, int]:
        """
        Append a new singleton slot.

        Returns (new_table, slot).
        """
        slot = len(self.labels)
        new_table = NetTable(
            labels=self.labels + (label,),
            parent=self.parent + (slot,),
            rank=self.rank + (0,),
        )
        return new_table, slot

    def find(self, slot: int) -> int:
        """Root slot of the group containing slot."""
        while self.parent[slot] != slot:
            slot = self.parent[slot]
        return slot

    def label(self, slot: int) -> str:
        """Node label of the group containing slot."""
        return self.labels[self.find(slot)]

    def union(self, slot_a: int, slot_b: int) -> NetTable:
        """Merge the groups of two slots. Returns the new table."""
        parent = list(self.parent)
        rank = list(self.rank)

        def find(s: int) -> int:
            root = s
            while parent[root] != root:
                root = parent[root]
            # Path compression on the copy
            while parent[s] != root:
                parent[s], s = root, parent[s]
            return root

        root_a = find(slot_a)
        root_b = find(slot_b)
        if root_a != root_b:
            if root_b == 0 or (root_a != 0 and rank[root_b] > rank[root_a]):
                root_a, root_b = root_b, root_a
            parent[root_b] = root_a
            if root_a != 0 and rank[root_a] == rank[root_b]:
                rank[root_a] += 1

        return NetTable(labels=self.labels, parent=tuple(parent), rank=tuple(rank))


class Circuit(NamedTuple):
    """
    Immutable circuit: ordered components plus their node groups.

    Every derived circuit gets its own copy of the component state records, so
    stepping it never touches the circuit it came from. Component references
    returned before a derivation therefore go stale; read live state through
    `state_of(circuit, component)`.

    Build using functional style:
        circuit = Circuit()
        circuit, vs = VSource(circuit, 10.0)
        circuit, r1 = R(circuit, 1000.0)
        circuit = connect(circuit, vs.ports[0], r1.ports[0])
    """
    components: tuple[Component, ...] = ()
    nets: NetTable = NetTable()

    def new_node(self) -> tuple[Circuit, int]:
        """
        Allocate a fresh, unconnected node slot.

        Returns (new_circuit, slot).
        """
        nets, slot = self.nets.add_slot(fresh_label())
        return self._replace(components=_fork(self.components), nets=nets), slot

    def add_component(self, component: Component) -> tuple[Circuit, Component]:
        """
        Append a component.

        Returns (new_circuit, component). The returned component is the one
        held by new_circuit.
        """
        if any(c.id == component.id for c in self.components):
            raise ValueError(f"Duplicate component id: {component.id}")
        return self._replace(components=_fork(self.components) + (component,)), component

    def step(self, dt: float, config: SimConfig | None = None) -> StepResult:
        """
        Run one simulation step on this circuit.

        Args:
            dt: Timestep in seconds

        Returns:
            StepResult with node voltages and voltage source currents
        """
        from .simulator import simulate_step
        if config is None:
            return simulate_step(self, dt)
        return simulate_step(self, dt, config)


def _port_id(port: Port | str) -> str:
    return port if isinstance(port, str) else port.id


def find_port(circuit: Circuit, port: Port | str) -> Port:
    """Look up a port of the circuit by record or id."""
    pid = _port_id(port)
    for comp in circuit.components:
        for p in comp.ports:
            if p.id == pid:
                return p
    raise KeyError(f"Unknown port: {pid}")


def get_component(circuit: Circuit, component_id: str) -> Component:
    """Look up a component by id."""
    for comp in circuit.components:
        if comp.id == component_id:
            return comp
    raise KeyError(f"Unknown component: {component_id}")


def state_of(circuit: Circuit, component: Component | str) -> Any:
    """State record that this circuit holds for a component (by record or id)."""
    cid = component if isinstance(component, str) else component.id
    return get_component(circuit, cid).state


def node_of(circuit: Circuit, port: Port | str) -> str:
    """Node label currently assigned to a port (GND for ground)."""
    if isinstance(port, str):
        port = find_port(circuit, port)
    return circuit.nets.label(port.slot)


def list_nodes(circuit: Circuit) -> tuple[str, ...]:
    """
    Distinct non-ground node labels in first-seen order.

    Order follows component insertion order, then port order, and fixes the
    row of each node in the MNA matrix.
    """
    seen: dict[str, None] = {}
    for comp in circuit.components:
        for p in comp.ports:
            label = circuit.nets.label(p.slot)
            if label != GND:
                seen.setdefault(label, None)
    return tuple(seen)


def connect(circuit: Circuit, port_a: Port | str, port_b: Port | str) -> Circuit:
    """
    Join two ports into one electrical node.

    Ground wins: if either side already belongs to the ground group the merged
    group is ground. Connecting ports that already share a node returns an
    equivalent circuit.

    Returns the new circuit; the input circuit is unchanged.
    """
    pa = find_port(circuit, port_a)
    pb = find_port(circuit, port_b)
    return circuit._replace(
        components=_fork(circuit.components),
        nets=circuit.nets.union(pa.slot, pb.slot),
    )


def remove_component(circuit: Circuit, component_id: str) -> Circuit:
    """Drop a component. Nodes it shared with others stay connected."""
    get_component(circuit, component_id)
    return circuit._replace(
        components=_fork(tuple(c for c in circuit.components if c.id != component_id))
    )


def update_params(circuit: Circuit, component_id: str, **values: float) -> Circuit:
    """
    Replace parameter fields of a component, keeping its ports and state.

    Example:
        circuit = update_params(circuit, r1.id, resistance=2000.0)
    """
    comp = get_component(circuit, component_id)
    if comp.params is None:
        raise ValueError(f"{comp.kind} {component_id} has no parameters")
    new_comp = comp._replace(params=comp.params._replace(**values))
    return circuit._replace(
        components=_fork(
            tuple(new_comp if c.id == component_id else c for c in circuit.components)
        )
    )
