from __future__ import annotations

import math
from typing import TYPE_CHECKING, Optional

from resolutionmodels.core.basis import DecayType
from resolutionmodels.models.resolution_model import ResolutionModel

if TYPE_CHECKING:
    from collections.abc import Set

    from resolutionmodels.core.node import RealVariable


class TruthModel(ResolutionModel):
    """
    Delta-function resolution model (perfect resolution).

    Convolved with a basis function it returns the basis function itself,
    restricted to the side of zero the decay extends to.
    """

    BASIS_CODES: dict[str, int] = {
        DecayType.SINGLE_SIDED: 1,
        DecayType.FLIPPED: 2,
        DecayType.DOUBLE_SIDED: 3,
    }

    def __init__(self, name: str, x: RealVariable, title: Optional[str] = None) -> None:
        super().__init__(name, x, title)

    def basis_code(self, basis_name: str) -> int:
        return self.BASIS_CODES.get(basis_name, 0)

    def evaluate(self) -> float:
        x = self.conv_var.value()

        if self._basis_code == 0:
            return 1.0 if x == 0.0 else 0.0

        tau = self._basis.parameters[0].value()
        if self._basis_code == 1:
            return math.exp(-x / tau) if x >= 0.0 else 0.0
        if self._basis_code == 2:
            return math.exp(x / tau) if x <= 0.0 else 0.0
        return math.exp(-abs(x) / tau)

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

        lower, upper = self.conv_var.min, self.conv_var.max
        if self._basis_code == 0:
            return 1.0 if lower <= 0.0 <= upper else 0.0

        tau = self._basis.parameters[0].value()
        result = 0.0
        if self._basis_code in (1, 3):
            result += tau * (math.exp(-max(lower, 0.0) / tau) - math.exp(-max(upper, 0.0) / tau))
        if self._basis_code in (2, 3):
            result += tau * (math.exp(min(upper, 0.0) / tau) - math.exp(min(lower, 0.0) / tau))
        return result
