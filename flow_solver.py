import time
from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Optional

import networkx as nx
from ortools.graph.python import min_cost_flow
from pulp import LpProblem, LpVariable, LpInteger, LpMinimize, lpSum, PULP_CBC_CMD

from network import Network
from utils import SuperstringError, vlog

DEFAULT_STRATEGY = "ortools"


class InfeasibleNetworkError(SuperstringError):
    """The min-cost flow solver found no feasible flow."""


@dataclass
class FlowSolution:
    total_cost: int
    flows: List[int]
    strategy: str

    def flow(self, arc: Optional[int]) -> int:
        """Flow on ``arc``; arcs that were never created carry nothing."""
        return 0 if arc is None else self.flows[arc]


def _shifted_supplies(network: Network) -> List[int]:
    """Supplies after moving every lower bound out of its arc."""
    supplies = list(network.supplies)
    for a in network.arcs:
        if a.lower:
            supplies[a.tail] -= a.lower
            supplies[a.head] += a.lower
    return supplies


def _solve_ortools(network: Network) -> Optional[List[int]]:
    smcf = min_cost_flow.SimpleMinCostFlow()
    unbounded = network.flow_bound()
    arc_ids = []
    for a in network.arcs:
        upper = unbounded if a.upper is None else a.upper
        arc_ids.append(smcf.add_arc_with_capacity_and_unit_cost(a.tail, a.head, upper - a.lower, a.cost))
    for node, supply in enumerate(_shifted_supplies(network)):
        smcf.set_node_supply(node, supply)
    status = smcf.solve()
    if status != smcf.OPTIMAL:
        vlog(f"OR-Tools min cost flow status: {status}")
        return None
    return [smcf.flow(i) + a.lower for i, a in zip(arc_ids, network.arcs)]


def _to_networkx(network: Network) -> nx.MultiDiGraph:
    G = nx.MultiDiGraph()
    for node, supply in enumerate(_shifted_supplies(network)):
        # networkx counts demand positively
        G.add_node(node, demand=-supply)
    for i, a in enumerate(network.arcs):
        attrs = {"weight": a.cost}
        if a.upper is not None:
            attrs["capacity"] = a.upper - a.lower
        G.add_edge(a.tail, a.head, key=i, **attrs)
    return G


def _solve_networkx(network: Network, algorithm) -> Optional[List[int]]:
    G = _to_networkx(network)
    try:
        _, flow_dict = algorithm(G, demand="demand", capacity="capacity", weight="weight")
    except nx.NetworkXUnfeasible:
        return None
    return [flow_dict[a.tail][a.head][i] + a.lower for i, a in enumerate(network.arcs)]


def _solve_simplex(network: Network) -> Optional[List[int]]:
    return _solve_networkx(network, nx.network_simplex)


def _solve_capacity(network: Network) -> Optional[List[int]]:
    return _solve_networkx(network, nx.capacity_scaling)


def _solve_cycle(network: Network) -> Optional[List[int]]:
    """Cycle canceling: any feasible flow, then push around negative residual cycles.

    Every arc gets its own mid node in the helper graphs so that parallel
    and opposite arcs between two nodes stay distinct in a DiGraph.
    """
    supplies = _shifted_supplies(network)
    unbounded = network.flow_bound()
    caps = [(unbounded if a.upper is None else a.upper) - a.lower for a in network.arcs]

    G = nx.DiGraph()
    for i, a in enumerate(network.arcs):
        G.add_edge(a.tail, ("arc", i), capacity=caps[i])
        G.add_edge(("arc", i), a.head, capacity=caps[i])
    need = 0
    for node, supply in enumerate(supplies):
        if supply > 0:
            G.add_edge("supply", node, capacity=supply)
            need += supply
        elif supply < 0:
            G.add_edge(node, "demand", capacity=-supply)
    flows = [0] * network.arc_count
    if need:
        value, flow_dict = nx.maximum_flow(G, "supply", "demand")
        if value < need:
            return None
        flows = [flow_dict[a.tail][("arc", i)] for i, a in enumerate(network.arcs)]

    while True:
        R = nx.DiGraph()
        for i, a in enumerate(network.arcs):
            if flows[i] < caps[i]:
                R.add_edge(a.tail, ("fwd", i), weight=a.cost)
                R.add_edge(("fwd", i), a.head, weight=0)
            if flows[i] > 0:
                R.add_edge(a.head, ("bwd", i), weight=-a.cost)
                R.add_edge(("bwd", i), a.tail, weight=0)
        if R.number_of_edges() == 0:
            break
        # a root reaching every node lets one search find any negative cycle
        R.add_edges_from((("root", n) for n in list(R.nodes)), weight=0)
        try:
            cycle = nx.find_negative_cycle(R, "root", weight="weight")
        except nx.NetworkXError:
            break
        steps = [n for n in cycle[:-1] if isinstance(n, tuple) and n[0] in ("fwd", "bwd")]
        delta = min(caps[i] - flows[i] if kind == "fwd" else flows[i] for kind, i in steps)
        for kind, i in steps:
            flows[i] += delta if kind == "fwd" else -delta
    return [f + a.lower for f, a in zip(flows, network.arcs)]


def _solve_lp(network: Network, cuts: Iterable[FrozenSet[int]] = ()) -> Optional[List[int]]:
    """Integer program over the arc flows, solved by CBC.

    Each cut is a set of nodes that must receive at least one unit of flow
    over an arc coming from outside the set.
    """
    prob = LpProblem("OverlapFlow", LpMinimize)
    flow_vars = [LpVariable(f"f_{i}", lowBound=a.lower, upBound=a.upper, cat=LpInteger)
                 for i, a in enumerate(network.arcs)]
    prob += lpSum(a.cost * v for a, v in zip(network.arcs, flow_vars))

    out_arcs = [[] for _ in range(network.node_count)]
    in_arcs = [[] for _ in range(network.node_count)]
    for a, v in zip(network.arcs, flow_vars):
        out_arcs[a.tail].append(v)
        in_arcs[a.head].append(v)
    for node, supply in enumerate(network.supplies):
        if not out_arcs[node] and not in_arcs[node]:
            if supply != 0:
                return None
            continue
        prob += lpSum(out_arcs[node]) - lpSum(in_arcs[node]) == supply, f"balance_{node}"

    for k, cut in enumerate(cuts):
        entering = [v for a, v in zip(network.arcs, flow_vars) if a.head in cut and a.tail not in cut]
        if not entering:
            return None
        prob += lpSum(entering) >= 1, f"cut_{k}"

    res = prob.solve(PULP_CBC_CMD(msg=False))
    if res != 1:
        return None
    return [int(round(v.value() or 0)) for v in flow_vars]


STRATEGIES = {
    "ortools": _solve_ortools,
    "simplex": _solve_simplex,
    "capacity": _solve_capacity,
    "cycle": _solve_cycle,
    "lp": _solve_lp,
}

# strategy tokens of the original command line
ALIASES = {
    "net": "simplex",
    "cap": "capacity",
    "cycle": "cycle",
    "cost": "ortools",
}


def _finish(network: Network, flows: Optional[List[int]], strategy: str, t0: float) -> FlowSolution:
    if flows is None:
        raise InfeasibleNetworkError(
            f"no feasible flow ({network.node_count} nodes, {network.arc_count} arcs, strategy {strategy})")
    if any(network.imbalance(flows)):
        raise InfeasibleNetworkError(f"strategy {strategy} returned a flow that does not balance every node")
    total_cost = sum(f * a.cost for f, a in zip(flows, network.arcs))
    vlog(f"Solved min cost flow with {strategy}", t0)
    return FlowSolution(total_cost, flows, strategy)


def solve(network: Network, strategy: str = DEFAULT_STRATEGY) -> FlowSolution:
    """Solve ``network`` for a minimum cost integral flow.

    Raises InfeasibleNetworkError when no flow satisfies every bound and
    node balance.
    """
    try:
        backend = STRATEGIES[strategy]
    except KeyError:
        raise ValueError(f"unknown solver strategy {strategy!r}; choose from {', '.join(STRATEGIES)}") from None
    t0 = time.time()
    return _finish(network, backend(network), strategy, t0)


def solve_with_cuts(network: Network, cuts: Iterable[FrozenSet[int]]) -> FlowSolution:
    """Minimum cost integral flow that also enters every node set in ``cuts``.

    Only the integer program can carry these constraints, so this always
    uses the ``lp`` backend.
    """
    t0 = time.time()
    return _finish(network, _solve_lp(network, list(cuts)), "lp+cuts", t0)
