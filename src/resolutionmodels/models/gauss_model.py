from __future__ import annotations

import math
from typing import TYPE_CHECKING, Optional

from scipy import special

from resolutionmodels.core.basis import DecayType
from resolutionmodels.models.resolution_model import ResolutionModel

if TYPE_CHECKING:
    from collections.abc import Set

    from resolutionmodels.core.node import RealNode, RealVariable

SQRT2 = math.sqrt(2.0)
SQRT2PI = math.sqrt(2.0 * math.pi)


class GaussModel(ResolutionModel):
    """
    Gaussian resolution model.

    Unconvolved it is a normalized Gaussian in the convolution variable.
    Convolved with an exponential decay basis exp(-t/tau) it evaluates

        1/2 * exp(s^2/(2 tau^2) - u/tau) * erfc((s/tau - u/s) / sqrt(2)),  u = x - mean,

    and the mirrored expression for the flipped decay.
    """

    BASIS_CODES: dict[str, int] = {
        DecayType.SINGLE_SIDED: 1,
        DecayType.FLIPPED: 2,
        DecayType.DOUBLE_SIDED: 3,
    }

    def __init__(
        self,
        name: str,
        x: RealVariable,
        mean: RealNode,
        sigma: RealNode,
        title: Optional[str] = None
    ) -> None:
        """
        Initialize the Gaussian resolution model.

        Args:
            name: Model name.
            x: Convolution variable.
            mean: Bias of the resolution.
            sigma: Width of the resolution.
            title: Human readable description.
        """
        super().__init__(name, x, title, [mean, sigma])
        self.mean = mean
        self.sigma = sigma

    def basis_code(self, basis_name: str) -> int:
        return self.BASIS_CODES.get(basis_name, 0)

    def evaluate(self) -> float:
        u = self.conv_var.value() - self.mean.value()
        s = self.sigma.value()

        if self._basis_code == 0:
            return math.exp(-0.5 * (u / s) ** 2) / (SQRT2PI * s)

        tau = self._basis.parameters[0].value()
        if self._basis_code == 1:
            return self._decay_convolution(u, s, tau)
        if self._basis_code == 2:
            return self._decay_convolution(-u, s, tau)
        return self._decay_convolution(u, s, tau) + self._decay_convolution(-u, s, tau)

    @staticmethod
    def _decay_convolution(u: float, s: float, tau: float) -> float:
        """Convolution of exp(-t/tau), t >= 0, with a Gaussian of width `s`."""
        z = (s / tau - u / s) / SQRT2
        if z >= 0.0:
            # erfcx keeps the large-z tail finite
            return 0.5 * math.exp(-0.5 * (u / s) ** 2) * float(special.erfcx(z))
        return 0.5 * math.exp(0.5 * (s / tau) ** 2 - u / tau) * float(special.erfc(z))

    def get_analytical_integral_wn(
        self,
        all_vars: Set[RealVariable],
        norm_set: Optional[Set[RealVariable]] = None
    ) -> tuple[int, set[RealVariable]]:
        if self._basis_code == 0 and self.conv_var in all_vars:
            return 1, {self.conv_var}
        return 0, set()

    def analytical_integral_wn(
        self,
        code: int,
        norm_set: Optional[Set[RealVariable]] = None
    ) -> float:
        if code != 1:
            return super().analytical_integral_wn(code, norm_set)

        x = self.conv_var
        mean = self.mean.value()
        scale = SQRT2 * self.sigma.value()
        return float(0.5 * (special.erf((x.max - mean) / scale) - special.erf((x.min - mean) / scale)))
