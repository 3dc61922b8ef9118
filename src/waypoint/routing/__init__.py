"""Routing: route table with deterministic, specificity-ordered matching.

Routes are declared during setup and frozen into an immutable table when
the engine starts. Deep links are parsed with the same matching rules.
"""
