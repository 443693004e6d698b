"""
Resolution Model Interface
==========================
A resolution model is a density in a convolution variable that can also be
convolved with a basis function. Before convolution it behaves as a plain
density; `convolution` returns a copy that evaluates the convolution of the
model with the basis function instead.
"""
from __future__ import annotations

from abc import abstractmethod
import logging
from typing import TYPE_CHECKING, Iterable, Optional, Protocol

from resolutionmodels.core.pdf import AbsPdf
from resolutionmodels.errors import ConfigurationError

if TYPE_CHECKING:
    from resolutionmodels.core.basis import BasisFunction
    from resolutionmodels.core.node import RealNode, RealVariable

logger = logging.getLogger(__name__)


class Named(Protocol):
    name: str


def convolution_name(model_name: str, basis: BasisFunction, owner: Named) -> str:
    """Name of the convolution of a model with `basis` requested by `owner`."""
    return f"{model_name}_conv_{basis.name}_[{owner.name}]"


def convolution_title(model_title: str, basis: BasisFunction) -> str:
    """Title of the convolution of a model with `basis`."""
    return f"{model_title} convoluted with basis function {basis.name}"


class ResolutionModel(AbsPdf):
    """
    Abstract base class for resolution models.
    """

    def __init__(
        self,
        name: str,
        conv_var: RealVariable,
        title: Optional[str] = None,
        servers: Iterable[RealNode] = ()
    ) -> None:
        """
        Initialize the resolution model.

        Args:
            name: Model name.
            conv_var: Convolution variable.
            title: Human readable description.
            servers: Parameters of the model besides the convolution variable.
        """
        super().__init__(name, title, [conv_var, *servers])
        self._conv_var = conv_var
        self._basis: Optional[BasisFunction] = None
        self._basis_code: int = 0

    @property
    def conv_var(self) -> RealVariable:
        """The convolution variable."""
        return self._conv_var

    @property
    def basis(self) -> Optional[BasisFunction]:
        """Attached basis function, None when used as a plain density."""
        return self._basis

    @property
    def active_basis_code(self) -> int:
        """Code of the attached basis function, 0 when there is none."""
        return self._basis_code

    @property
    def is_convolved(self) -> bool:
        return self._basis is not None

    @abstractmethod
    def basis_code(self, basis_name: str) -> int:
        """
        Code under which the model supports the given basis function.

        Args:
            basis_name: Expression string of the basis function.

        Returns:
            Positive code if the convolution is supported, 0 otherwise.
        """
        pass

    def force_analytical_int(self, var: RealVariable) -> bool:
        """Plain (non-convolved) models are always integrated analytically."""
        return self._basis_code == 0

    def _check_basis_variable(self, basis: BasisFunction) -> None:
        if basis.primary_variable is not self._conv_var:
            raise ConfigurationError(
                f"{self.name}: convolution variable of basis function '{basis.name}' "
                f"({basis.primary_variable.name}) does not match model variable ({self._conv_var.name})."
            )

    def change_basis(self, basis: BasisFunction) -> None:
        """
        Attach a basis function, replacing the current one.

        Raises:
            ConfigurationError: If the model does not support the basis.
        """
        code = self.basis_code(basis.name)
        if code == 0:
            raise ConfigurationError(f"{self.name}: basis function '{basis.name}' is not supported.")
        if self._basis is not None:
            self.servers.remove(self._basis)
        self.servers.append(basis)
        self._basis = basis
        self._basis_code = code
        self._reset_caches()

    def convolution(self, basis: BasisFunction, owner: Named) -> ResolutionModel:
        """
        Create a copy of this model convolved with `basis`.

        The owner's name is part of the copy's name so that several densities
        convolving the same model yield distinct objects.

        Args:
            basis: Basis function to convolve with.
            owner: Object requesting the convolution.

        Raises:
            ConfigurationError: If the basis is not defined in the convolution
                variable or is not supported.

        Returns:
            The convolved model.
        """
        self._check_basis_variable(basis)

        conv = self.clone(convolution_name(self.name, basis, owner))
        conv.title = convolution_title(self.title, basis)
        conv.change_basis(basis)
        logger.debug(f"Created convolution {conv.name} (basis code {conv.active_basis_code})")
        return conv
