"""
Package for executing batches of lab runs.

It expands JSON parameter files into all option combinations and runs every combination as a
separate `python -m` process, optionally split across several tasks.
"""
