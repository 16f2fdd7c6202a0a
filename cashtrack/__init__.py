"""
CashTrack - Source Package

The financial aggregation and insight engine behind the CashTrack
personal-finance app: income, expenses, savings and savings goals go in,
summaries, trends, goal progress and plain-language insights come out.

DESIGN PRINCIPLES:
1. Bad data degrades to safe defaults, never to a crash
2. Every snapshot is recomputed from scratch
3. The store is an external collaborator behind an interface
4. Display settings are passed in, never read from globals
5. Every state change is auditable
"""

__version__ = "1.0.0"
__author__ = "CashTrack Team"
