import time
from typing import Dict, FrozenSet, List, Tuple

import networkx as nx
from colorama import Fore

from flow_solver import FlowSolution, solve_with_cuts
from overlap import OverlapNetwork
from utils import SuperstringError, log_with_time, vlog

EMPTY = 0  # sentinel node every production starts from and returns to


class TourError(SuperstringError):
    """The reconstructed tour graph has no Eulerian circuit."""


class TourGraph:
    """
    Multigraph whose arcs carry the text fragments of the output.
    Node 0 is the EMPTY sentinel; word and affix nodes are created on first
    reference through node_for().
    """

    def __init__(self):
        self.node_count = 1
        self.arcs: List[Tuple[int, int, str]] = []
        self._handles: Dict[Tuple[str, str], int] = {}

    def node_for(self, kind: str, text: str) -> int:
        key = (kind, text)
        node = self._handles.get(key)
        if node is None:
            node = self._handles[key] = self.node_count
            self.node_count += 1
        return node

    def entities(self) -> Dict[int, Tuple[str, str]]:
        """Node -> (kind, text); EMPTY maps to ("empty", "")."""
        entities = {node: key for key, node in self._handles.items()}
        entities[EMPTY] = ("empty", "")
        return entities

    def add_arcs(self, tail: int, head: int, label: str, count: int = 1):
        for _ in range(count):
            self.arcs.append((tail, head, label))

    @property
    def arc_count(self) -> int:
        return len(self.arcs)

    def to_networkx(self) -> nx.MultiDiGraph:
        G = nx.MultiDiGraph()
        for i, (tail, head, label) in enumerate(self.arcs):
            G.add_edge(tail, head, key=i, label=label)
        return G


def build_tour(overlap: OverlapNetwork, solution: FlowSolution) -> TourGraph:
    """Turn the solved flow into fragment-labelled arcs."""
    t0 = time.time()
    tour = TourGraph()
    for word in overlap.words.values():
        if solution.flow(word.exit_arc):
            tour.add_arcs(tour.node_for("word", word.text), EMPTY, "")
        if solution.flow(word.entry_arc):
            tour.add_arcs(EMPTY, tour.node_for("word", word.text), word.text)
    for affix in overlap.affixes:
        for e in affix.suffix_edges:
            f = solution.flow(e.arc)
            if f:
                tour.add_arcs(tour.node_for("word", e.word.text), tour.node_for("affix", affix.text), "", f)
        for e in affix.prefix_edges:
            f = solution.flow(e.arc)
            if f:
                tour.add_arcs(tour.node_for("affix", affix.text), tour.node_for("word", e.word.text),
                              e.word.text[len(affix.text):], f)
    vlog(f"Built tour graph with {tour.arc_count} arcs", t0)
    return tour


def emit(tour: TourGraph) -> str:
    """Concatenate the arc labels along an Eulerian circuit from EMPTY."""
    if not tour.arcs:
        return ""
    G = tour.to_networkx()
    if EMPTY not in G or not nx.is_eulerian(G):
        raise TourError(f"tour graph with {tour.node_count} nodes and {tour.arc_count} arcs is not Eulerian")
    return "".join(tour.arcs[key][2] for _, _, key in nx.eulerian_circuit(G, source=EMPTY, keys=True))


def stranded_components(tour: TourGraph) -> List[List[Tuple[str, str]]]:
    """Entities of every tour component that EMPTY cannot reach.

    The tour is balanced, so weak components are the strong ones.
    """
    if not tour.arcs:
        return []
    entities = tour.entities()
    stranded = []
    for component in nx.weakly_connected_components(tour.to_networkx()):
        if EMPTY not in component:
            stranded.append(sorted(entities[n] for n in component))
    return stranded


def component_cut(overlap: OverlapNetwork, entities) -> FrozenSet[int]:
    """Network nodes behind a set of tour entities."""
    nodes = set()
    for kind, text in entities:
        if kind == "word":
            word = overlap.words[text]
            nodes.update((word.prefix_node, word.suffix_node))
        else:
            nodes.add(overlap.affixes[text].node)
    return frozenset(nodes)


def connect(overlap: OverlapNetwork, solution: FlowSolution) -> Tuple[TourGraph, FlowSolution]:
    """Build the tour, re-solving until every production is reachable from EMPTY.

    An optimal flow may close overlap cycles that no entry arc reaches. Each
    such component holds a required word, and in any connected tour some arc
    enters it from outside, so requiring inflow into its nodes removes it
    without excluding a real covering string.
    """
    tour = build_tour(overlap, solution)
    cuts: List[FrozenSet[int]] = []
    stranded = stranded_components(tour)
    while stranded:
        for entities in stranded:
            if not any(kind == "word" and not overlap.words[text].redundant for kind, text in entities):
                raise TourError(f"stranded tour component without a required word: {entities}")
            cuts.append(component_cut(overlap, entities))
        log_with_time(f"Tour graph has {len(stranded)} stranded component(s); "
                      f"re-solving with {len(cuts)} connectivity cut(s)", color=Fore.YELLOW)
        solution = solve_with_cuts(overlap.network, cuts)
        tour = build_tour(overlap, solution)
        stranded = stranded_components(tour)
    return tour, solution
