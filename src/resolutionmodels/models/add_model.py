"""
Additive Resolution Model
=========================
Sum of resolution models acting as a single resolution model:

    ADDMODEL = c_1*MODEL_1 + c_2*MODEL_2 + ... + (1 - sum(c_1 ... c_n-1))*MODEL_n

The coefficients weight the components by their full integral over the
convolution variable. The last coefficient is never stored; it is derived
from the explicit ones on every evaluation.

A composite only supports the basis functions supported by all of its
components, and a coefficient must not share dependents with the component
it weights (see `check_dependents`).
"""
from __future__ import annotations

import logging
from numbers import Real
from typing import TYPE_CHECKING, Callable, Iterable, Optional, Union

from resolutionmodels import config
from resolutionmodels.core.node import Constant, RealNode
from resolutionmodels.errors import ConfigurationError, ProgrammingError
from resolutionmodels.integration.registry import IntegrationCodeRegistry
from resolutionmodels.models.resolution_model import (
    Named, ResolutionModel, convolution_name, convolution_title
)

if TYPE_CHECKING:
    from collections.abc import Set

    from resolutionmodels.core.basis import BasisFunction
    from resolutionmodels.core.node import RealVariable

logger = logging.getLogger(__name__)


class AddModel(ResolutionModel):
    """
    Composite resolution model built from N models and N-1 coefficients.
    """

    def __init__(
        self,
        name: str,
        models: Iterable[ResolutionModel],
        coefficients: Iterable[Union[RealNode, float]],
        title: Optional[str] = None
    ) -> None:
        """
        Initialize the composite. Model `i` is paired with coefficient `i`;
        the last model is weighted by one minus the sum of all coefficients.

        Args:
            name: Model name.
            models: Component resolution models.
            coefficients: One coefficient less than there are models. Plain
                numbers are wrapped in constants.
            title: Human readable description.

        Raises:
            ConfigurationError: If the number of coefficients is not one less
                than the number of models, or if the models do not share the
                same convolution variable.
            TypeError: If a component is not a resolution model or a
                coefficient is not a real-valued node.
        """
        models = list(models)
        coefficients = [_as_coefficient(name, i, coef) for i, coef in enumerate(coefficients)]

        if len(models) != len(coefficients) + 1:
            raise ConfigurationError(
                f"{name}: number of coefficients ({len(coefficients)}) must be one less "
                f"than number of models ({len(models)})."
            )

        for model in models:
            if not isinstance(model, ResolutionModel):
                raise TypeError(f"{name}: {model!r} is not a resolution model.")

        conv_var = models[0].conv_var
        for model in models[1:]:
            if model.conv_var is not conv_var:
                raise ConfigurationError(
                    f"{name}: models have inconsistent convolution variables "
                    f"('{conv_var.name}' in {models[0].name}, '{model.conv_var.name}' in {model.name})."
                )

        super().__init__(name, conv_var, title, [*models, *coefficients])

        self._pairs: list[tuple[RealNode, ResolutionModel]] = list(zip(coefficients, models))
        self._last_model: ResolutionModel = models[-1]
        self._code_registry = IntegrationCodeRegistry()
        self._error_count: int = 0
        self._owns_components: bool = False

    @property
    def models(self) -> list[ResolutionModel]:
        return [model for _, model in self._pairs] + [self._last_model]

    @property
    def coefficients(self) -> list[RealNode]:
        return [coef for coef, _ in self._pairs]

    @property
    def owns_components(self) -> bool:
        """True if the components are convolutions created for this composite."""
        return self._owns_components

    @property
    def degeneracy_warning_count(self) -> int:
        """Number of degeneracy warnings `evaluate` has printed (saturates at the cap)."""
        return self._error_count

    @property
    def code_registry(self) -> IntegrationCodeRegistry:
        return self._code_registry

    def last_coefficient(self) -> float:
        """Derived weight of the last model, 1 - sum(coefficients)."""
        return 1.0 - sum(coef.value() for coef, _ in self._pairs)

    def clone(self, name: Optional[str] = None) -> AddModel:
        """
        Copy of the composite sharing its components and coefficients.

        The copy never owns the components, even if this composite does.
        """
        other = super().clone(name)
        other._code_registry = self._code_registry.copy()
        other._error_count = 0
        other._owns_components = False
        return other

    def _running_sum(
        self,
        term: Callable[[int, ResolutionModel], float],
        label: Optional[str] = None
    ) -> tuple[float, float]:
        """
        Blend per-component terms with the coefficients.

        Args:
            term: Callable returning the term of component `i`.
            label: If given, each product is logged at debug level.

        Returns:
            The blended value and the derived last coefficient.
        """
        value = 0.0
        last_coef = 1.0
        for i, (coef, model) in enumerate(self._pairs):
            coef_value = coef.value()
            model_term = term(i, model)
            if label:
                logger.debug(f"{self.name}: {label} x coef = {model_term} x {coef_value} = {model_term * coef_value}")
            value += model_term * coef_value
            last_coef -= coef_value

        model_term = term(len(self._pairs), self._last_model)
        if label:
            logger.debug(f"{self.name}: {label} x coef = {model_term} x {last_coef} = {model_term * last_coef}")
        value += model_term * last_coef
        return value, last_coef

    def _warn_degenerate(self, method: str, last_coef: float, suffix: str = "") -> None:
        logger.warning(
            f"{self.name}.{method}: sum of model coefficients not in range [0-1], "
            f"value={1.0 - last_coef}{suffix}"
        )

    def evaluate(self) -> float:
        value, last_coef = self._running_sum(lambda i, model: model.value())

        if not 0.0 <= last_coef <= 1.0 and self._error_count < config.MAX_DEGENERACY_WARNINGS:
            self._error_count += 1
            suffix = " (no more will be printed)" if self._error_count == config.MAX_DEGENERACY_WARNINGS else ""
            self._warn_degenerate("evaluate", last_coef, suffix)

        return value

    def get_norm(self, norm_set: Optional[Set[RealVariable]] = None) -> float:
        """
        Normalization of the composite.

        Without a basis function the composite is normalized like any other
        density. Convolved, it is the coefficient-weighted sum of the
        component normalizations.
        """
        if self._basis is None:
            return super().get_norm(norm_set)

        norm, last_coef = self._running_sum(lambda i, model: model.get_norm(norm_set), label="norm")
        if not 0.0 <= last_coef <= 1.0:
            self._warn_degenerate("get_norm", last_coef)
        return norm

    def get_norm_special(self, norm_set: Optional[Set[RealVariable]] = None) -> float:
        """
        Same as `get_norm`, but every component computes its normalization
        with its separate integral cache.
        """
        if self._basis is None:
            return super().get_norm_special(norm_set)

        norm, last_coef = self._running_sum(lambda i, model: model.get_norm_special(norm_set), label="special norm")
        if not 0.0 <= last_coef <= 1.0:
            self._warn_degenerate("get_norm_special", last_coef)
        return norm

    def basis_code(self, basis_name: str) -> int:
        """
        Code of the first component if all components support the basis, else 0.
        """
        codes = [model.basis_code(basis_name) for model in self.models]
        return codes[0] if all(codes) else 0

    def force_analytical_int(self, var: RealVariable) -> bool:
        return self._basis_code == 0

    def convolution(self, basis: BasisFunction, owner: Named) -> AddModel:
        """
        Create a composite of the component convolutions with `basis`.

        The new composite owns the component convolutions and shares the
        coefficients of this composite.

        Raises:
            ConfigurationError: If the basis is not defined in the convolution
                variable or is not supported by all components.
        """
        self._check_basis_variable(basis)

        models = [model.convolution(basis, owner) for model in self.models]
        conv = AddModel(
            convolution_name(self.name, basis, owner),
            models,
            self.coefficients,
            title=convolution_title(self.title, basis)
        )
        conv.change_basis(basis)
        conv._owns_components = True
        logger.debug(f"Created composite convolution {conv.name} with {len(models)} components")
        return conv

    def get_analytical_integral_wn(
        self,
        all_vars: Set[RealVariable],
        norm_set: Optional[Set[RealVariable]] = None
    ) -> tuple[int, set[RealVariable]]:
        """
        Find the variables all components can integrate analytically.

        Each component is first asked what it can integrate out of `all_vars`;
        only variables every component supports are kept. Each component is
        then asked again for exactly that common set and must return a
        nonzero code. The component codes are stored as one registry entry.

        Returns:
            Tuple of the master code (0 if no analytic integration is
            possible) and the analytically integrated variables.
        """
        # Convolved composites are integrated by the convoluted density
        if self._basis_code != 0:
            return 0, set()

        common = set(all_vars)
        for model in self.models:
            _, sub_anal_vars = model.get_analytical_integral_wn(all_vars, norm_set)
            common &= set(sub_anal_vars)

        if not common:
            return 0, set()

        sub_codes: list[int] = []
        all_ok = True
        for model in self.models:
            sub_code, _ = model.get_analytical_integral_wn(common, norm_set)
            if sub_code == 0:
                logger.warning(
                    f"{self.name}: component model {model.name} advertises an inconsistent set of integrals "
                    f"(e.g. (X,Y) but not X or Y individually). Distributed analytical integration disabled."
                )
                all_ok = False
            sub_codes.append(sub_code)

        if not all_ok:
            return 0, set()

        master_code = self._code_registry.store(sub_codes)
        logger.debug(f"{self.name}: integration code {master_code} -> {sub_codes} over {sorted(v.name for v in common)}")
        return master_code, common

    def analytical_integral_wn(
        self,
        code: int,
        norm_set: Optional[Set[RealVariable]] = None
    ) -> float:
        """
        Evaluate the analytic integral negotiated as `code`.

        Raises:
            ProgrammingError: If the code was not issued by this composite.
        """
        if code == 0:
            return self.value()

        try:
            sub_codes = self._code_registry.retrieve(code)
        except ProgrammingError as e:
            raise ProgrammingError(f"{self.name}: {e}") from e

        value, last_coef = self._running_sum(
            lambda i, model: model.analytical_integral_wn(sub_codes[i], norm_set)
        )
        if not 0.0 <= last_coef <= 1.0:
            self._warn_degenerate("analytical_integral_wn", last_coef)
        return value

    def check_dependents(self, observables: Optional[Set[RealVariable]] = None) -> bool:
        """
        Check that no coefficient shares dependents with the model it weights.

        Args:
            observables: Restrict the check to these variables, e.g. the
                variables of a dataset. All variables are checked if None.

        Returns:
            True if at least one coefficient/model pair overlaps.
        """
        violation = False
        for coef, model in self._pairs:
            if model.dependent_overlaps(observables, coef):
                logger.error(
                    f"{self.name}: coefficient {coef.name} and model {model.name} "
                    f"have one or more dependents in common"
                )
                violation = True
        return violation


def _as_coefficient(owner_name: str, index: int, coef: Union[RealNode, float]) -> RealNode:
    if isinstance(coef, RealNode):
        return coef
    if isinstance(coef, Real):
        return Constant(f"{owner_name}_coef{index}", float(coef))
    raise TypeError(f"{owner_name}: coefficient {coef!r} is not a real-valued node.")
