import sys
import time
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

import requests

from utils import log_with_time, vlog


@dataclass
class Word:
    """One distinct dictionary entry.

    Node and arc fields are handles into the overlap network arena; they stay
    ``None`` until the network builder allocates them. ``entry_arc`` and
    ``exit_arc`` are only ever set for required (non-redundant) words.
    """
    text: str
    redundant: bool = False
    prefix_node: Optional[int] = None
    suffix_node: Optional[int] = None
    internal_arc: Optional[int] = None
    entry_arc: Optional[int] = None
    exit_arc: Optional[int] = None


def _substrings(text: str):
    for i in range(len(text)):
        for j in range(len(text), i, -1):
            yield text[i:j]


def preprocess(lines: Iterable[str]) -> Dict[str, Word]:
    """Deduplicate ``lines`` and flag every word contained in another one.

    Returns the words keyed by text, in first-read order.
    """
    t0 = time.time()
    words: Dict[str, Word] = {}
    subwords = set()
    for text in lines:
        if text in words:
            # a repeated line adds no substring we have not seen already
            continue
        redundant = text in subwords
        for s in _substrings(text):
            other = words.get(s)
            if other is not None:
                other.redundant = True
            subwords.add(s)
        words[text] = Word(text, redundant=redundant)
    vlog(f"Preprocessed {len(words)} distinct words ({len(subwords)} subwords)", t0)
    return words


def _split_lines(text: str) -> List[str]:
    lines = text.split("\n")
    # a final terminator does not start another (empty) word
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def load_dictionary(path=None, url=None, stream=None) -> List[str]:
    """Read newline-separated words from ``url``, ``path`` or ``stream``.

    ``stream`` defaults to stdin. Only the line terminator is stripped;
    empty lines are kept as zero-length words.
    """
    t0 = time.time()
    if url is not None:
        log_with_time("⟳ Downloading dictionary…")
        resp = requests.get(url, timeout=30)
        resp.raise_for_status()
        raw = resp.text
    elif path is not None:
        log_with_time(f"Reading dictionary from {path}")
        with open(path, "r", encoding="utf-8", errors="surrogateescape", newline="") as f:
            raw = f.read()
    else:
        log_with_time("Reading dictionary from stdin")
        stream = stream if stream is not None else sys.stdin
        buffer = getattr(stream, "buffer", None)
        if buffer is not None:
            # any byte line is a word; undecodable bytes survive as surrogates
            raw = buffer.read().decode("utf-8", "surrogateescape")
        else:
            raw = stream.read()
    lines = _split_lines(raw)
    vlog(f"Dictionary loaded ({len(lines)} lines)", t0)
    return lines
