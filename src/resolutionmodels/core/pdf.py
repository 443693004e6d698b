"""
Probability Density Functions
=============================
Generic normalization behavior shared by all density functions.

A density is normalized by integrating it over a normalization set. The
`RealIntegral` objects doing so are cached per normalization set; the cache
holds the integration plan, the integral itself is re-evaluated on each call.

Two independent caches exist. `get_norm` serves direct callers while
`get_norm_special` serves the analytic integration path of convoluted
densities, so the two never evict or reuse each other's integral objects.
"""
from __future__ import annotations

import copy
import logging
from typing import TYPE_CHECKING, Iterable, Optional

import numpy as np
import matplotlib.pyplot as plt

from resolutionmodels import config
from resolutionmodels.core.node import RealNode
from resolutionmodels.integration.integral import RealIntegral

if TYPE_CHECKING:
    from collections.abc import Set

    import numpy.typing as npt

    from resolutionmodels.core.node import RealVariable

logger = logging.getLogger(__name__)


class AbsPdf(RealNode):
    """
    Base class for density functions.
    """

    def __init__(
        self,
        name: str,
        title: Optional[str] = None,
        servers: Iterable[RealNode] = ()
    ) -> None:
        super().__init__(name, title, servers)
        self._reset_caches()

    def _reset_caches(self) -> None:
        self._norm_integrals: dict[frozenset[RealVariable], RealIntegral] = {}
        self._special_norm_integrals: dict[frozenset[RealVariable], RealIntegral] = {}

    def get_norm(self, norm_set: Optional[Set[RealVariable]] = None) -> float:
        """
        Integral of the density over the normalization set.

        Args:
            norm_set: Variables the density is normalized over. An empty or
                missing set means the density is used unnormalized.

        Returns:
            The normalization integral.
        """
        return self._cached_norm(self._norm_integrals, norm_set)

    def get_norm_special(self, norm_set: Optional[Set[RealVariable]] = None) -> float:
        """Same as `get_norm`, computed with a separate integral cache."""
        return self._cached_norm(self._special_norm_integrals, norm_set)

    def _cached_norm(
        self,
        cache: dict[frozenset[RealVariable], RealIntegral],
        norm_set: Optional[Set[RealVariable]]
    ) -> float:
        if not norm_set:
            return 1.0
        key = frozenset(norm_set)
        integral = cache.get(key)
        if integral is None:
            integral = RealIntegral(self, key)
            cache[key] = integral
            logger.debug(f"{self.name}: created normalization integral {integral}")
        return integral.value()

    def get_val(self, norm_set: Optional[Set[RealVariable]] = None) -> float:
        """Value of the density normalized over `norm_set`."""
        return self.value() / self.get_norm(norm_set)

    def clone(self, name: Optional[str] = None) -> AbsPdf:
        """
        Shallow copy of the density that shares its servers.

        Args:
            name: Name of the copy, defaults to the original name.

        Returns:
            The copy, with empty normalization caches.
        """
        other = copy.copy(self)
        other.servers = list(self.servers)
        other._reset_caches()
        if name is not None:
            other.name = name
        return other

    def preview_curve(
        self,
        variable: RealVariable,
        steps: int = config.PREVIEW_STEPS,
        normalized: bool = True
    ) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
        """
        Sample the density along `variable`.

        Args:
            variable: Variable to scan over its (finite) range.
            steps: Number of samples.
            normalized: Whether to normalize over `variable`.

        Returns:
            Arrays of variable values and density values.
        """
        xs = np.linspace(variable.min, variable.max, steps)
        norm = self.get_norm({variable}) if normalized else 1.0

        saved_value = variable.value()
        values = np.empty_like(xs)
        try:
            for i, x in enumerate(xs):
                variable.set_value(x)
                values[i] = self.value() / norm
        finally:
            variable.set_value(saved_value)
        return xs, values

    def plot(self, variable: RealVariable, steps: int = config.PREVIEW_STEPS) -> None:
        """
        Plot the normalized density along `variable`.
        """
        xs, values = self.preview_curve(variable, steps)

        plt.rcParams["figure.constrained_layout.use"] = True
        plt.figure(figsize=(7, 5))

        plt.plot(xs, values, 'b', lw=2)

        plt.grid(visible=True, which='major', axis='both', linestyle='-', color='gray', lw=0.5)
        plt.minorticks_on()
        plt.grid(visible=True, which='minor', axis='both', linestyle=':', color='gray', lw=0.5)

        plt.title(self.title)
        unit = f" ({variable.unit})" if variable.unit else ""
        plt.xlabel(f"{variable.title}{unit}")
        plt.ylabel("Probability density")

        plt.show()
