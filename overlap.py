import time
from dataclasses import dataclass
from typing import Dict

from affix_index import AffixIndex
from dictionary import Word
from network import Network
from utils import vlog


@dataclass
class OverlapNetwork:
    network: Network
    source: int
    sink: int
    return_arc: int
    words: Dict[str, Word]
    affixes: AffixIndex

    @property
    def required_count(self) -> int:
        return sum(1 for w in self.words.values() if not w.redundant)


def _add_word(network: Network, source: int, sink: int, word: Word):
    supply = 0 if word.redundant else 1
    word.suffix_node = network.add_node(supply)
    word.prefix_node = network.add_node(-supply)
    word.internal_arc = network.add_arc(word.prefix_node, word.suffix_node, cost=0)
    if not word.redundant:
        word.exit_arc = network.add_arc(word.suffix_node, sink, upper=1, cost=0)
        # producing the whole word from nothing
        word.entry_arc = network.add_arc(source, word.prefix_node, upper=1, cost=len(word.text))


def build_overlap_network(words: Dict[str, Word]) -> OverlapNetwork:
    """Build the overlap network for preprocessed ``words``.

    Each required word must be produced once: either from scratch through its
    entry arc, or by appending its tail to an affix already produced by
    another word. The sink -> source return arc lets the source open as many
    independent productions as the cheapest cover needs.
    """
    t0 = time.time()
    network = Network()
    source = network.add_node(1)
    sink = network.add_node(-1)
    return_arc = network.add_arc(sink, source, cost=0)

    affixes = AffixIndex()
    for word in words.values():
        _add_word(network, source, sink, word)
        affixes.add_word(word)

    candidates = len(affixes)
    affixes.materialize(network)
    vlog(f"Kept {len(affixes)} of {candidates} candidate affixes", t0)
    return OverlapNetwork(network, source, sink, return_arc, words, affixes)
