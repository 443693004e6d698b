"""
Basis Functions
===============
Convolution kernels that resolution models can be convolved with.

A basis function is identified by its expression string: resolution models
look the expression up in `basis_code` to decide whether, and how, they can
compute the convolution in closed form. `@0` always denotes the convolution
variable, `@1`, `@2`, ... the remaining parameters.
"""
from __future__ import annotations

from enum import StrEnum
from typing import Callable

import numpy as np

from resolutionmodels.core.node import Formula, RealNode, RealVariable


class DecayType(StrEnum):
    SINGLE_SIDED = "exp(-@0/@1)"
    FLIPPED = "exp(@0/@1)"
    DOUBLE_SIDED = "exp(-abs(@0)/@1)"


_DECAY_FUNCTIONS: dict[DecayType, Callable[[float, float], float]] = {
    DecayType.SINGLE_SIDED: lambda t, tau: np.exp(-t / tau),
    DecayType.FLIPPED: lambda t, tau: np.exp(t / tau),
    DecayType.DOUBLE_SIDED: lambda t, tau: np.exp(-abs(t) / tau),
}


class BasisFunction(Formula):
    """
    Formula used as a convolution kernel.

    The name of a basis function is its expression, e.g. ``exp(-@0/@1)``.
    """

    def __init__(
        self,
        expression: str,
        function: Callable[..., float],
        x: RealVariable,
        *params: RealNode
    ) -> None:
        """
        Initialize the basis function.

        Args:
            expression: Expression string identifying the basis.
            function: Callable evaluating the expression for (x, *params).
            x: Primary (convolution) variable.
            params: Remaining parameters in `@1`, `@2`, ... order.
        """
        super().__init__(expression, function, x, *params)

    @property
    def primary_variable(self) -> RealNode:
        """The first server, i.e. the variable the kernel is convolved in."""
        return self.servers[0]

    @property
    def parameters(self) -> list[RealNode]:
        """Parameters following the primary variable."""
        return self.servers[1:]

    @classmethod
    def decay(
        cls,
        x: RealVariable,
        tau: RealNode,
        decay_type: DecayType = DecayType.SINGLE_SIDED
    ) -> BasisFunction:
        """
        Exponential decay basis with lifetime `tau`.

        Args:
            x: Convolution variable (decay time).
            tau: Lifetime parameter.
            decay_type: Which side(s) of zero the decay extends to.

        Returns:
            The basis function.
        """
        decay_type = DecayType(decay_type)
        return cls(decay_type.value, _DECAY_FUNCTIONS[decay_type], x, tau)
