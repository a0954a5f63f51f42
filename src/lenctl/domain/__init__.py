"""Domain layer: constants, operators, constraints and constrained slices.

This layer depends only on the standard library.
It must never import from services, config, commands, or output.
"""
