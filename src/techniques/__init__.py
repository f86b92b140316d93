"""
techniques - Runnable Examples of Efficient Statistical Computing

Each module pairs a naive implementation with faster alternatives that
produce the same result:

    preallocation  - constant-vector construction (grow vs allocate once)
    vectorization  - random-matrix construction and element-wise transforms
    compiled       - interpreted loops vs compiled reductions
    duplication    - detecting hidden copies of arrays and data frames
    binary_io      - text vs binary storage, chunked reading
    parallel       - sequential vs process-pool replication

The examples are independent of one another and share no state.
"""
