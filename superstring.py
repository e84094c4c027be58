import argparse
import sys
import time
from dataclasses import dataclass, asdict
from typing import Iterable

from colorama import Fore

import utils
from utils import log_with_time, vlog, write_report
from dictionary import preprocess, load_dictionary
from overlap import build_overlap_network
from flow_solver import solve, STRATEGIES, ALIASES, DEFAULT_STRATEGY, InfeasibleNetworkError
from tour import connect, emit, TourError

EXIT_INFEASIBLE = 1
EXIT_NOT_EULERIAN = 2
EXIT_BAD_DICTIONARY = 3


@dataclass
class SuperstringResult:
    text: str
    words: int = 0
    required: int = 0
    affixes: int = 0
    network_nodes: int = 0
    network_arcs: int = 0
    lower_bound: int = 0
    cost: int = 0
    tour_nodes: int = 0
    tour_arcs: int = 0

    def stats(self):
        stats = asdict(self)
        del stats["text"]
        return stats


def find_superstring(lines: Iterable[str], strategy: str = DEFAULT_STRATEGY) -> SuperstringResult:
    """Shortest string containing every line of ``lines`` as a substring.

    ``lower_bound`` is the cost of the first flow solution; ``cost`` is the
    cost of the connected one the text was read from, and equals its length.
    Raises InfeasibleNetworkError or TourError when the flow or the tour
    phase fails; neither happens for a correctly built network.
    """
    words = preprocess(lines)
    if not words:
        log_with_time("Empty dictionary, nothing to cover")
        return SuperstringResult("")

    overlap = build_overlap_network(words)
    net = overlap.network
    log_with_time(
        f"Read {len(words)} words and found {len(overlap.affixes)} affixes; "
        f"created network with {net.node_count} nodes and {net.arc_count} arcs"
    )

    log_with_time(f"Using {strategy} min cost flow strategy")
    first = solve(net, strategy)
    log_with_time(f"Lower bound: {first.total_cost}")

    tour, solution = connect(overlap, first)
    if solution is not first:
        log_with_time(f"Connected tour costs {solution.total_cost}")
    log_with_time(f"Created tour graph with {tour.node_count} nodes and {tour.arc_count} arcs")

    text = emit(tour)
    return SuperstringResult(
        text,
        words=len(words),
        required=overlap.required_count,
        affixes=len(overlap.affixes),
        network_nodes=net.node_count,
        network_arcs=net.arc_count,
        lower_bound=first.total_cost,
        cost=solution.total_cost,
        tour_nodes=tour.node_count,
        tour_arcs=tour.arc_count,
    )


def shortest_superstring(lines: Iterable[str], strategy: str = DEFAULT_STRATEGY) -> str:
    return find_superstring(lines, strategy).text


def _write_output(text):
    # words read with surrogateescape go back out as the bytes they came from
    out = getattr(sys.stdout, "buffer", None)
    if out is None:
        sys.stdout.write(text)
        sys.stdout.flush()
        return
    sys.stdout.flush()
    out.write(text.encode("utf-8", "surrogateescape"))
    out.flush()


def run_solver(argv=None):
    parser = argparse.ArgumentParser(description="Shortest string covering every word of a dictionary")
    choice = parser.add_mutually_exclusive_group()
    choice.add_argument(
        "--solver",
        choices=sorted(STRATEGIES),
        default=DEFAULT_STRATEGY,
        help=f"Min cost flow strategy (default: {DEFAULT_STRATEGY})",
    )
    for token, strategy in ALIASES.items():
        choice.add_argument(f"--{token}", dest="solver", action="store_const", const=strategy,
                            help=f"Same as --solver {strategy}")
    parser.add_argument("--dict", type=str, default=None, help="Read words from this file instead of stdin")
    parser.add_argument("--dict-url", type=str, default=None, help="Download words from this URL instead of stdin")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    parser.add_argument("--report", type=str, default=None, help="Write a JSON report of the run to this path")
    args = parser.parse_args(argv)

    utils.start_time = time.time()
    utils.VERBOSE = args.verbose

    try:
        lines = load_dictionary(path=args.dict, url=args.dict_url)
    except Exception as e:
        log_with_time(f"error: could not read dictionary: {e}", color=Fore.RED)
        return EXIT_BAD_DICTIONARY

    try:
        result = find_superstring(lines, args.solver)
    except InfeasibleNetworkError as e:
        log_with_time(f"error: no solution found: {e}", color=Fore.RED)
        return EXIT_INFEASIBLE
    except TourError as e:
        log_with_time(f"error: {e}", color=Fore.RED)
        return EXIT_NOT_EULERIAN

    _write_output(result.text)
    log_with_time(f"✅ {len(result.text)} characters", color=Fore.GREEN)

    if args.report:
        write_report(args.report, result.stats(), result.text)

    vlog("Done", utils.start_time)
    return 0
