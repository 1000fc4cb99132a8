"""Charting core: buckets, statistics, formatting and timestamp detection.

Nothing in here performs I/O; see ``lowcharts.adapters`` for input reading,
terminal rendering and the command line.
"""
