"""
Real Integral
=============
Integral of a node over a set of variables.

On construction the integrand is asked which variables it can integrate
analytically; the answer (integration code and variable split) is kept for
the lifetime of the integral object. Variables the integrand cannot handle
are integrated numerically with nested Gauss-Legendre quadrature over their
ranges.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from resolutionmodels import config
from resolutionmodels.errors import ConfigurationError
from resolutionmodels.integration.gauss import gauss_points_weights_interval

if TYPE_CHECKING:
    from collections.abc import Set

    from resolutionmodels.core.node import RealNode, RealVariable

logger = logging.getLogger(__name__)


class RealIntegral:
    """
    Mixed analytic/numeric integral of `function` over `int_vars`.
    """

    def __init__(
        self,
        function: RealNode,
        int_vars: Set[RealVariable],
        norm_set: Optional[Set[RealVariable]] = None,
        n_points: int = config.DEFAULT_INTEGRATION_POINTS
    ) -> None:
        """
        Initialize the integral and negotiate the analytic part.

        Args:
            function: The integrand.
            int_vars: Variables to integrate over.
            norm_set: Normalization set passed on to the integrand.
            n_points: Gauss points per numerically integrated variable.
        """
        self.function = function
        self.int_vars = frozenset(int_vars)
        self.norm_set = frozenset(norm_set) if norm_set is not None else None
        self.n_points = n_points

        self.code, anal_vars = function.get_analytical_integral_wn(self.int_vars, self.norm_set)
        self.anal_vars = frozenset(anal_vars)
        self.num_vars: list[RealVariable] = sorted(self.int_vars - self.anal_vars, key=lambda v: v.name)

        for var in self.num_vars:
            if not var.has_finite_range:
                raise ConfigurationError(
                    f"Cannot integrate '{function.name}' numerically over '{var.name}': "
                    f"range [{var.min}, {var.max}] is not finite."
                )

        logger.debug(
            f"Integral of {function.name}: analytic over {sorted(v.name for v in self.anal_vars)} "
            f"(code {self.code}), numeric over {[v.name for v in self.num_vars]}"
        )

    def __repr__(self) -> str:
        return (f"{self.__class__.__name__}(function='{self.function.name}', "
                f"vars={sorted(v.name for v in self.int_vars)}, code={self.code})")

    def value(self) -> float:
        """Evaluate the integral for the current values of all parameters."""
        if not self.num_vars:
            return self._integrand()
        return self._integrate(0)

    def _integrand(self) -> float:
        return self.function.analytical_integral_wn(self.code, self.norm_set)

    def _integrate(self, depth: int) -> float:
        var = self.num_vars[depth]
        points, weights = gauss_points_weights_interval(self.n_points, var.min, var.max)

        saved_value = var.value()
        total = 0.0
        try:
            for point, weight in zip(points, weights):
                var.set_value(point)
                if depth + 1 < len(self.num_vars):
                    total += weight * self._integrate(depth + 1)
                else:
                    total += weight * self._integrand()
        finally:
            var.set_value(saved_value)
        return total
