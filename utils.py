# --- utils.py ---

import sys
import time
import json
import os
from colorama import Fore, Style, init

init()

VERBOSE = False
start_time = None


class SuperstringError(RuntimeError):
    """Base class for failures of a superstring run."""


def log_with_time(msg, color=Fore.LIGHTBLUE_EX):
    """Print ``msg`` with a timestamp to stderr.

    stdout is reserved for the covering string, so diagnostics never go there.
    """
    global start_time
    if start_time is None:
        start_time = time.time()
    elapsed = time.time() - start_time
    mins = int(elapsed // 60)
    secs = elapsed % 60
    timestamp = Style.DIM + f"[{mins:02}:{secs:06.3f}]" + Style.RESET_ALL
    print(f"{timestamp} {color}{msg}{Style.RESET_ALL}", file=sys.stderr, flush=True)

def vlog(msg, t0=None):
    if VERBOSE:
        if t0 is not None:
            elapsed = time.time() - t0
            log_with_time(f"{msg} (took {elapsed:.3f}s)")
        else:
            log_with_time(msg)

def write_report(report_path, stats, text=None):
    """Write the diagnostics of a run to ``report_path`` as JSON.

    ``stats`` is a mapping of counters; when ``text`` is given its length is
    recorded too (the string itself is not, dictionaries can be large).
    """
    report_dir = os.path.dirname(report_path)
    if report_dir:
        os.makedirs(report_dir, exist_ok=True)

    report = {"date": time.strftime('%Y-%m-%d'), "stats": dict(stats)}
    if text is not None:
        report["output_length"] = len(text)

    with open(report_path, 'w') as f:
        json.dump(report, f, indent=2)
    log_with_time(f"Run report written to {report_path}", color=Fore.GREEN)
