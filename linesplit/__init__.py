"""
linesplit: line-aligned splitting and compression of large text files.

This package cuts an input stream into size-bounded chunks that end only at
line boundaries, compresses each chunk independently with zstd, and writes
them as numbered files.
"""

__version__ = "1.0.0"
