"""
Resolution models. `AddModel` combines other resolution models into one.

Note: This module should be pure Python/NumPy/SciPy and holds no plotting code.
"""
