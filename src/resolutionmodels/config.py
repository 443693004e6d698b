"""
Global Constants
================
Numerical settings shared by the models and the integration engine.

Exports:
    MAX_DEGENERACY_WARNINGS (int): Number of coefficient degeneracy warnings
        a composite model prints from `evaluate` before going quiet.
    DEFAULT_INTEGRATION_POINTS (int): Gauss-Legendre points per numerically
        integrated variable.
    PREVIEW_STEPS (int): Number of samples used for preview curves.
"""

MAX_DEGENERACY_WARNINGS: int = 10

DEFAULT_INTEGRATION_POINTS: int = 128

PREVIEW_STEPS: int = 200
