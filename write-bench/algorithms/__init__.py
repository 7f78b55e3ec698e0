"""
Benchmark loops: writer, sampler and final reporter.
"""
