"""
performance - Measuring Statistical Code

Two modules cover the two questions every optimisation starts with:

    benchmarks  - Is version B faster than version A, and do they agree?
                  A timing / memory harness, checked many-way comparisons,
                  and the scenario suite that runs every technique in
                  :mod:`techniques` against its naive counterpart.

    profiling   - Where does the time go?  cProfile output summarised as a
                  per-function table of self time and total time.

Measure first: the slowest line is rarely the one you expect.
"""
