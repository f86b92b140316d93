"""
binary_io.py - Text vs Binary Storage for Intermediate Results

Re-reading a large CSV at the top of every script is one of the most common
avoidable costs in statistical work.  Parsing text means tokenising every
field and converting decimal strings back into doubles; a binary format just
copies bytes.

Formats compared
----------------
    csv     - pandas text round trip; portable, human-readable, slowest
    pickle  - pandas binary round trip; preserves dtypes (including
              categoricals) exactly
    npy     - numpy binary dump of the numeric columns as one float64 matrix;
              the smallest and fastest, but only for homogeneous numeric data

For data that does not fit in memory, :func:`chunked_column_means` shows the
streaming alternative: read the CSV in fixed-size chunks and keep running
totals instead of loading everything at once.
"""

import logging
import os
import time
from pathlib import Path
from typing import List, Optional, Sequence, Union

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

FORMATS = ("csv", "pickle", "npy")

PathLike = Union[str, os.PathLike]


def make_example_frame(nrow: int, seed: int = 42) -> pd.DataFrame:
    """Reproducible mixed-type frame: an id, three float columns and a categorical group."""
    if nrow < 0:
        raise ValueError(f"nrow must be non-negative, got {nrow}")
    rng = np.random.default_rng(seed)
    return pd.DataFrame({
        "id": np.arange(nrow, dtype=np.int64),
        "x": rng.normal(0.0, 1.0, nrow),
        "y": rng.normal(10.0, 2.0, nrow),
        "z": rng.random(nrow),
        "group": pd.Categorical(rng.choice(["a", "b", "c"], nrow), categories=["a", "b", "c"]),
    })


def numeric_columns(frame: pd.DataFrame) -> List[str]:
    return frame.select_dtypes(include=[np.number]).columns.tolist()


def _check_format(fmt: str) -> None:
    if fmt not in FORMATS:
        raise ValueError(f"Unknown format {fmt!r}; expected one of {FORMATS}")


def write_frame(frame: pd.DataFrame, path: PathLike, fmt: str) -> Path:
    """Write *frame* to *path* in *fmt* and return the path."""
    _check_format(fmt)
    path = Path(path)
    if fmt == "csv":
        frame.to_csv(path, index=False)
    elif fmt == "pickle":
        frame.to_pickle(path)
    else:
        # np.save appends .npy when missing; keep the caller's path exact
        with open(path, "wb") as fh:
            np.save(fh, frame[numeric_columns(frame)].to_numpy(dtype=np.float64))
    return path


def read_frame(path: PathLike, fmt: str, columns: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """
    Read a frame written by :func:`write_frame`.

    For ``npy`` the file holds only a matrix, so *columns* names its columns
    (defaults to ``col0, col1, ...``).
    """
    _check_format(fmt)
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"{path} not found")

    if fmt == "csv":
        return pd.read_csv(path)
    if fmt == "pickle":
        return pd.read_pickle(path)

    matrix = np.load(path)
    if columns is None:
        columns = [f"col{i}" for i in range(matrix.shape[1])]
    return pd.DataFrame(matrix, columns=list(columns))


def _roundtrip_ok(original: pd.DataFrame, loaded: pd.DataFrame, fmt: str) -> bool:
    if fmt == "pickle":
        return original.equals(loaded)

    cols = numeric_columns(original)
    if fmt == "npy":
        expected = original[cols].to_numpy(dtype=np.float64)
        return bool(np.array_equal(expected, loaded[cols].to_numpy()))

    # CSV loses the categorical dtype and can round the last bit of a double
    if list(loaded.columns) != list(original.columns):
        return False
    if not np.allclose(original[cols].to_numpy(dtype=np.float64),
                       loaded[cols].to_numpy(dtype=np.float64), rtol=1e-12, atol=0.0):
        return False
    for col in original.columns.difference(cols):
        if not (original[col].astype(str).to_numpy() == loaded[col].astype(str).to_numpy()).all():
            return False
    return True


def benchmark_formats(
    frame: pd.DataFrame,
    directory: PathLike,
    num_runs: int = 3,
) -> pd.DataFrame:
    """
    Time writing and reading *frame* in every format.

    Returns
    -------
    pd.DataFrame
        Indexed by format, with columns write_mean_s, read_mean_s,
        size_bytes and roundtrip_ok.
    """
    if num_runs < 1:
        raise ValueError(f"num_runs must be >= 1, got {num_runs}")
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)

    rows = []
    cols = numeric_columns(frame)
    for fmt in FORMATS:
        path = directory / f"example.{fmt}"

        write_times = []
        for _ in range(num_runs):
            t0 = time.perf_counter()
            write_frame(frame, path, fmt)
            write_times.append(time.perf_counter() - t0)

        read_times = []
        loaded = None
        for _ in range(num_runs):
            t0 = time.perf_counter()
            loaded = read_frame(path, fmt, columns=cols if fmt == "npy" else None)
            read_times.append(time.perf_counter() - t0)

        rows.append({
            "format": fmt,
            "write_mean_s": float(np.mean(write_times)),
            "read_mean_s": float(np.mean(read_times)),
            "size_bytes": path.stat().st_size,
            "roundtrip_ok": _roundtrip_ok(frame, loaded, fmt),
        })
        logger.info(f"{fmt}: write {rows[-1]['write_mean_s']:.4f}s, "
                    f"read {rows[-1]['read_mean_s']:.4f}s, {rows[-1]['size_bytes']} bytes")

    return pd.DataFrame(rows).set_index("format")


def chunked_column_means(
    path: PathLike,
    chunksize: int,
    columns: Optional[Sequence[str]] = None,
) -> pd.Series:
    """
    Column means of a CSV computed chunk by chunk.

    Only one chunk is held in memory at a time; running sums and non-null
    counts are carried between chunks, so the result equals
    ``pd.read_csv(path)[columns].mean()``.
    """
    if chunksize < 1:
        raise ValueError(f"chunksize must be >= 1, got {chunksize}")
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"{path} not found")

    sums = None
    counts = None
    n_chunks = 0
    for chunk in pd.read_csv(path, chunksize=chunksize, usecols=columns):
        numeric = chunk.select_dtypes(include=[np.number])
        if sums is None:
            sums = numeric.sum()
            counts = numeric.count()
        else:
            sums = sums.add(numeric.sum(), fill_value=0.0)
            counts = counts.add(numeric.count(), fill_value=0)
        n_chunks += 1

    logger.debug(f"Read {path} in {n_chunks} chunk(s) of up to {chunksize} rows")
    if sums is None:
        return pd.Series(dtype=np.float64)
    return sums / counts
