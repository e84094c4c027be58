import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

import pytest

from network import Network
from dictionary import preprocess
from overlap import build_overlap_network
from flow_solver import solve, solve_with_cuts, STRATEGIES, ALIASES, InfeasibleNetworkError


@pytest.fixture(params=sorted(STRATEGIES))
def strategy(request):
    return request.param


def test_cheapest_arcs_fill_first(strategy):
    net = Network()
    a = net.add_node(2)
    b = net.add_node(-2)
    cheap = net.add_arc(a, b, upper=1, cost=1)
    dear = net.add_arc(a, b, cost=3)
    solution = solve(net, strategy)
    assert solution.total_cost == 4
    assert solution.flow(cheap) == 1
    assert solution.flow(dear) == 1
    assert solution.strategy == strategy


def test_lower_bounds_are_honoured(strategy):
    net = Network()
    s = net.add_node(1)
    t = net.add_node(-1)
    forward = net.add_arc(s, t, upper=3, cost=5)
    back = net.add_arc(t, s, upper=2, cost=1, lower=2)
    solution = solve(net, strategy)
    assert solution.flows[back] == 2
    assert solution.flows[forward] == 3
    assert solution.total_cost == 17


def test_no_path_is_infeasible(strategy):
    net = Network()
    s = net.add_node(1)
    t = net.add_node(-1)
    net.add_arc(t, s)
    with pytest.raises(InfeasibleNetworkError):
        solve(net, strategy)


def test_capacity_shortfall_is_infeasible(strategy):
    net = Network()
    s = net.add_node(2)
    t = net.add_node(-2)
    net.add_arc(s, t, upper=1)
    with pytest.raises(InfeasibleNetworkError):
        solve(net, strategy)


@pytest.mark.parametrize("words,cost", [
    (["cat"], 3),
    (["cat", "at"], 3),
    (["cat", "dog"], 6),
    (["cats", "atsdog"], 7),
    (["abc", "bcd", "cde"], 5),
])
def test_overlap_network_cost(strategy, words, cost):
    overlap = build_overlap_network(preprocess(words))
    solution = solve(overlap.network, strategy)
    assert solution.total_cost == cost
    assert not any(overlap.network.imbalance(solution.flows))


def test_missing_arc_carries_no_flow():
    overlap = build_overlap_network(preprocess(["cat", "at"]))
    solution = solve(overlap.network)
    assert solution.flow(overlap.words["at"].entry_arc) == 0


def test_unknown_strategy():
    net = Network()
    with pytest.raises(ValueError):
        solve(net, "magic")


def test_cycle_canceling_reroutes_through_cheaper_path():
    net = Network()
    s = net.add_node(1)
    m = net.add_node(0)
    t = net.add_node(-1)
    direct = net.add_arc(s, t, cost=5)
    first = net.add_arc(s, m, upper=1, cost=1)
    second = net.add_arc(m, t, upper=1, cost=1)
    solution = solve(net, "cycle")
    assert solution.total_cost == 2
    assert solution.flow(direct) == 0
    assert solution.flow(first) == solution.flow(second) == 1


def test_cut_forces_flow_into_node_set():
    net = Network()
    s = net.add_node(1)
    t = net.add_node(-1)
    a = net.add_node(0)
    net.add_arc(s, t, cost=1)
    into = net.add_arc(s, a, upper=1, cost=2)
    out = net.add_arc(a, t, upper=1, cost=2)
    assert solve(net).total_cost == 1
    solution = solve_with_cuts(net, [frozenset({a})])
    assert solution.total_cost == 4
    assert solution.flow(into) == solution.flow(out) == 1
    assert solution.strategy == "lp+cuts"


def test_cut_without_entering_arc_is_infeasible():
    net = Network()
    s = net.add_node(1)
    t = net.add_node(-1)
    a = net.add_node(0)
    net.add_arc(s, t)
    net.add_arc(a, t)
    with pytest.raises(InfeasibleNetworkError):
        solve_with_cuts(net, [frozenset({a})])


def test_aliases_name_known_strategies():
    assert set(ALIASES.values()) <= set(STRATEGIES)
    assert ALIASES["net"] == "simplex"
    assert ALIASES["cost"] == "ortools"
