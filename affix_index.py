from dataclasses import dataclass, field
from typing import Dict, List, Optional

from dictionary import Word
from network import Network


@dataclass
class Edge:
    word: Word
    arc: Optional[int] = None


@dataclass
class Affix:
    text: str
    suffix_edges: List[Edge] = field(default_factory=list)
    prefix_edges: List[Edge] = field(default_factory=list)
    node: Optional[int] = None

    def is_useful(self) -> bool:
        if not self.suffix_edges or not self.prefix_edges:
            return False
        # a lone word overlapping itself is already covered by its internal arc
        if (len(self.suffix_edges) == 1 and len(self.prefix_edges) == 1
                and self.suffix_edges[0].word is self.prefix_edges[0].word):
            return False
        return True


class AffixIndex:
    """
    Candidate overlap points keyed by text.

    Every proper prefix and proper suffix of every word is registered; after
    all words are in, only affixes that can join two word ends become nodes.
    One affix node replaces the arcs between every pair of words sharing it.
    """

    def __init__(self):
        self._affixes: Dict[str, Affix] = {}

    def _get(self, text: str) -> Affix:
        affix = self._affixes.get(text)
        if affix is None:
            affix = self._affixes[text] = Affix(text)
        return affix

    def add_word(self, word: Word):
        text = word.text
        for i in range(1, len(text)):
            self._get(text[:i]).prefix_edges.append(Edge(word))
            self._get(text[i:]).suffix_edges.append(Edge(word))

    def __len__(self):
        return len(self._affixes)

    def __iter__(self):
        return iter(self._affixes.values())

    def __getitem__(self, text: str) -> Affix:
        return self._affixes[text]

    def __contains__(self, text: str) -> bool:
        return text in self._affixes

    def prune(self) -> int:
        """Drop affixes that cannot carry an overlap. Returns how many were dropped."""
        kept = {text: a for text, a in self._affixes.items() if a.is_useful()}
        dropped = len(self._affixes) - len(kept)
        self._affixes = kept
        return dropped

    def materialize(self, network: Network):
        """Add a node per affix plus its suffix and prefix arcs to ``network``."""
        self.prune()
        for affix in self._affixes.values():
            affix.node = network.add_node(0)
            for e in affix.suffix_edges:
                e.arc = network.add_arc(e.word.suffix_node, affix.node, cost=0)
            for e in affix.prefix_edges:
                e.arc = network.add_arc(affix.node, e.word.prefix_node,
                                        cost=len(e.word.text) - len(affix.text))
