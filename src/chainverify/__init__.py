"""
chainverify: Integrity verification for distributed random linked lists.

A map/aggregate pass that classifies every node key of a randomly
generated chain as referenced, unreferenced or undefined, and turns
the resulting counters into a pass/fail verdict.
"""

__version__ = "0.1.0"
