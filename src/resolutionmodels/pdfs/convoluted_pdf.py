"""
Convoluted Densities
====================
Densities written as a sum of basis functions convolved with a resolution
model:

    PDF(t) = sum_k c_k * (basis_k (x) model)(t)

The resolution model provides one convolution object per basis function.
Normalization over the convolution variable is done analytically by summing
the normalizations of the convolution objects, which are requested through
`get_norm_special` so that they live in their own integral cache.
"""
from __future__ import annotations

import logging
from numbers import Real
from typing import TYPE_CHECKING, Iterable, Optional, Union

from resolutionmodels.core.basis import BasisFunction, DecayType
from resolutionmodels.core.node import Constant, RealNode
from resolutionmodels.core.pdf import AbsPdf

if TYPE_CHECKING:
    from collections.abc import Set

    from resolutionmodels.core.node import RealVariable
    from resolutionmodels.models.resolution_model import ResolutionModel

logger = logging.getLogger(__name__)


class ConvolutedPdf(AbsPdf):
    """
    Density built from basis functions convolved with a resolution model.
    """

    def __init__(
        self,
        name: str,
        conv_var: RealVariable,
        model: ResolutionModel,
        bases: Iterable[tuple[BasisFunction, Union[RealNode, float]]],
        title: Optional[str] = None
    ) -> None:
        """
        Initialize the density.

        Args:
            name: Density name.
            conv_var: Convolution variable, shared with `model`.
            model: Resolution model to convolve each basis function with.
            bases: Pairs of basis function and its coefficient.
            title: Human readable description.
        """
        super().__init__(name, title, [conv_var])
        self.conv_var = conv_var
        self.model = model

        self._convolutions: list[tuple[RealNode, ResolutionModel]] = []
        for i, (basis, coef) in enumerate(bases):
            if isinstance(coef, Real):
                coef = Constant(f"{name}_basis{i}_coef", float(coef))
            conv = model.convolution(basis, self)
            self._convolutions.append((coef, conv))
            self.servers.extend([coef, conv])

        logger.debug(f"{self.name}: {len(self._convolutions)} convolution(s) with {model.name}")

    @property
    def convolutions(self) -> list[ResolutionModel]:
        return [conv for _, conv in self._convolutions]

    def evaluate(self) -> float:
        return sum(coef.value() * conv.value() for coef, conv in self._convolutions)

    def get_analytical_integral_wn(
        self,
        all_vars: Set[RealVariable],
        norm_set: Optional[Set[RealVariable]] = None
    ) -> tuple[int, set[RealVariable]]:
        if self.conv_var in all_vars:
            return 1, {self.conv_var}
        return 0, set()

    def analytical_integral_wn(
        self,
        code: int,
        norm_set: Optional[Set[RealVariable]] = None
    ) -> float:
        if code != 1:
            return super().analytical_integral_wn(code, norm_set)

        int_set = {self.conv_var}
        return sum(coef.value() * conv.get_norm_special(int_set) for coef, conv in self._convolutions)


class DecayPdf(ConvolutedPdf):
    """
    Exponential decay with lifetime `tau` smeared by a resolution model.
    """

    def __init__(
        self,
        name: str,
        t: RealVariable,
        tau: RealNode,
        model: ResolutionModel,
        decay_type: DecayType = DecayType.SINGLE_SIDED,
        title: Optional[str] = None
    ) -> None:
        self.tau = tau
        self.decay_type = DecayType(decay_type)
        basis = BasisFunction.decay(t, tau, self.decay_type)
        super().__init__(name, t, model, [(basis, 1.0)], title)
