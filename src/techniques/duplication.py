"""
duplication.py - Tracing Object Duplication

Statistical scripts are often slow not because of arithmetic but because of
hidden copies: an expression that looks like a small update silently
duplicates a large array or data frame.  numpy makes the distinction
observable:

    - basic slicing and transposition return *views* that share the input's
      buffer;
    - arithmetic that binds a new name (``y = x + 1``) and integer-array
      ("fancy") indexing allocate fresh buffers;
    - augmented assignment (``x += 1``) writes into the existing buffer.

:func:`trace_copies` runs an operation and reports which of these happened,
together with the peak number of bytes allocated while it ran
(via :mod:`tracemalloc`).

The data-frame pair at the bottom shows the same effect at a larger scale:
growing a frame with repeated ``pd.concat`` duplicates every row built so far
on every iteration.
"""

import logging
import tracemalloc
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


@dataclass
class CopyReport:
    """Outcome of tracing one operation on one input array."""

    name: str
    shares_memory: bool
    modified_input: bool
    peak_bytes: int
    input_bytes: int

    @property
    def copied(self) -> bool:
        return not self.shares_memory

    @property
    def copy_ratio(self) -> float:
        """Peak bytes allocated per byte of input (about 1.0 for a full copy)."""
        if self.input_bytes == 0:
            return 0.0
        return self.peak_bytes / self.input_bytes

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "copied": self.copied,
            "shares_memory": self.shares_memory,
            "modified_input": self.modified_input,
            "peak_bytes": self.peak_bytes,
            "input_bytes": self.input_bytes,
            "copy_ratio": self.copy_ratio,
        }


def trace_copies(
    func: Callable[[np.ndarray], np.ndarray],
    array: np.ndarray,
    name: Optional[str] = None,
) -> CopyReport:
    """
    Run ``func(array)`` and report whether it duplicated its input.

    The input is passed through unchanged, so in-place operations really do
    mutate it; a private snapshot taken beforehand is used to detect that.

    Raises
    ------
    RuntimeError
        If tracemalloc is already tracing (nested traces would report
        misleading peaks).
    """
    if tracemalloc.is_tracing():
        raise RuntimeError("trace_copies cannot run while tracemalloc is already tracing")

    label = name or getattr(func, "__name__", repr(func))
    snapshot = array.copy()

    tracemalloc.start()
    try:
        tracemalloc.reset_peak()
        result = func(array)
        _, peak = tracemalloc.get_traced_memory()
    finally:
        tracemalloc.stop()

    shares = isinstance(result, np.ndarray) and np.shares_memory(result, array)
    modified = not np.array_equal(snapshot, array, equal_nan=array.dtype.kind in "fc")

    report = CopyReport(
        name=label,
        shares_memory=bool(shares),
        modified_input=bool(modified),
        peak_bytes=int(peak),
        input_bytes=int(array.nbytes),
    )
    logger.debug(
        "%s: copied=%s modified_input=%s peak=%d bytes",
        label, report.copied, report.modified_input, report.peak_bytes,
    )
    return report


# ---------------------------------------------------------------------------
# Demonstration operations
# ---------------------------------------------------------------------------

def add_in_place(x: np.ndarray) -> np.ndarray:
    x += 1
    return x


def add_with_copy(x: np.ndarray) -> np.ndarray:
    return x + 1


def slice_view(x: np.ndarray) -> np.ndarray:
    return x[::2]


def fancy_index_copy(x: np.ndarray) -> np.ndarray:
    return x[np.arange(0, x.shape[0], 2)]


def transpose_view(x: np.ndarray) -> np.ndarray:
    return x.T


DUPLICATION_EXAMPLES: Dict[str, Callable[[np.ndarray], np.ndarray]] = {
    "add_in_place": add_in_place,
    "add_with_copy": add_with_copy,
    "slice_view": slice_view,
    "fancy_index_copy": fancy_index_copy,
    "transpose_view": transpose_view,
}


# ---------------------------------------------------------------------------
# Data-frame growth
# ---------------------------------------------------------------------------

def _frame_columns(n_rows: int, seed: int) -> Dict[str, np.ndarray]:
    if n_rows < 0:
        raise ValueError(f"n_rows must be non-negative, got {n_rows}")
    rng = np.random.default_rng(seed)
    return {
        "id": np.arange(n_rows, dtype=np.int64),
        "x": rng.random(n_rows),
        "y": rng.random(n_rows),
    }


def grow_frame_rowwise(n_rows: int, seed: int = 42) -> pd.DataFrame:
    """Append one single-row frame per iteration; every concat copies all prior rows."""
    cols = _frame_columns(n_rows, seed)
    if n_rows == 0:
        return pd.DataFrame(cols)

    frame = None
    for i in range(n_rows):
        row = pd.DataFrame({
            "id": np.array([cols["id"][i]], dtype=np.int64),
            "x": np.array([cols["x"][i]], dtype=np.float64),
            "y": np.array([cols["y"][i]], dtype=np.float64),
        })
        frame = row if frame is None else pd.concat([frame, row], ignore_index=True)
    return frame


def build_frame_once(n_rows: int, seed: int = 42) -> pd.DataFrame:
    """Build the columns first, construct the frame once."""
    return pd.DataFrame(_frame_columns(n_rows, seed))


def duplication_summary(n: int = 1_000_000) -> pd.DataFrame:
    """Trace every demonstration operation on a fresh input and tabulate the reports."""
    rows = []
    for name, func in DUPLICATION_EXAMPLES.items():
        x = np.arange(n, dtype=np.float64)
        rows.append(trace_copies(func, x, name=name).to_dict())
    return pd.DataFrame(rows).set_index("name")
