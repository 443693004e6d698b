"""
Evaluatable Nodes
=================
Scalar nodes of the expression graph that models are built from.

Classes:
    RealNode: Abstract base of every real-valued node.
    RealVariable: Leaf variable with a value and an optional range.
    Constant: Leaf value that no integration or fit can vary.
    Formula: Node computed from the values of other nodes.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable, Iterable, Optional

import numpy as np

from resolutionmodels.errors import ProgrammingError

if TYPE_CHECKING:
    from collections.abc import Set


class RealNode(ABC):
    """
    Abstract base class for real-valued nodes of the expression graph.
    """

    def __init__(
        self,
        name: str,
        title: Optional[str] = None,
        servers: Iterable[RealNode] = ()
    ) -> None:
        """
        Initialize the node.

        Args:
            name: Unique name of the node.
            title: Human readable description, defaults to the name.
            servers: Nodes whose values this node depends on.
        """
        self.name = name
        self.title = title if title is not None else name
        self.servers: list[RealNode] = list(servers)

    def __repr__(self) -> str:
        """String representation of the node."""
        return f"{self.__class__.__name__}(name='{self.name}')"

    @abstractmethod
    def evaluate(self) -> float:
        """Calculate the raw value of the node from its servers."""
        pass

    def value(self) -> float:
        """Current value of the node."""
        return float(self.evaluate())

    def leaf_variables(self) -> set[RealVariable]:
        """Collect all variables this node depends on, directly or through servers."""
        leaves: set[RealVariable] = set()
        for server in self.servers:
            leaves |= server.leaf_variables()
        return leaves

    def dependents(self, observables: Optional[Set[RealVariable]] = None) -> set[RealVariable]:
        """
        Variables this node depends on.

        Args:
            observables: If given, only variables in this set are reported.

        Returns:
            Set of variables.
        """
        leaves = self.leaf_variables()
        if observables is None:
            return leaves
        return leaves & set(observables)

    def dependent_overlaps(
        self,
        observables: Optional[Set[RealVariable]],
        other: RealNode
    ) -> bool:
        """Check whether this node and `other` share any dependent variable."""
        return bool(self.dependents(observables) & other.dependents(observables))

    def get_analytical_integral_wn(
        self,
        all_vars: Set[RealVariable],
        norm_set: Optional[Set[RealVariable]] = None
    ) -> tuple[int, set[RealVariable]]:
        """
        Determine which variables of `all_vars` can be integrated analytically.

        Args:
            all_vars: Variables over which an integral is requested.
            norm_set: Normalization set the integral is evaluated with.

        Returns:
            Tuple of the integration code (0 means no analytic integration)
            and the set of analytically integrated variables.
        """
        return 0, set()

    def analytical_integral_wn(
        self,
        code: int,
        norm_set: Optional[Set[RealVariable]] = None
    ) -> float:
        """
        Evaluate the analytic integral identified by `code`.

        Code 0 means that no integration is requested and returns the value.

        Raises:
            ProgrammingError: If the code was not issued by this node.
        """
        if code == 0:
            return self.value()
        raise ProgrammingError(f"{self.name}: unrecognized integration code {code}.")


class RealVariable(RealNode):
    """
    A variable that can be set from outside, e.g. an observable or a parameter.
    """

    def __init__(
        self,
        name: str,
        value: float,
        min: float = -np.inf,
        max: float = np.inf,
        unit: str = "",
        title: Optional[str] = None
    ) -> None:
        """
        Initialize the variable.

        Args:
            name: Variable name.
            value: Initial value.
            min: Lower bound of the range, used for integration.
            max: Upper bound of the range, used for integration.
            unit: Unit label for plots.
            title: Human readable description.
        """
        super().__init__(name, title)
        if min > max:
            raise ValueError(f"Invalid range [{min}, {max}] for variable '{name}'.")
        self._value = float(value)
        self.min = float(min)
        self.max = float(max)
        self.unit = unit

    def __repr__(self) -> str:
        """String representation of the variable."""
        return f"{self.__class__.__name__}(name='{self.name}', value={self._value}, range=[{self.min}, {self.max}])"

    def evaluate(self) -> float:
        return self._value

    def set_value(self, value: float) -> None:
        """Assign a new value. Values outside the range are accepted as given."""
        self._value = float(value)

    @property
    def has_finite_range(self) -> bool:
        """True if both range limits are finite."""
        return bool(np.isfinite(self.min) and np.isfinite(self.max))

    def leaf_variables(self) -> set[RealVariable]:
        return {self}


class Constant(RealNode):
    """A fixed value. Constants are never reported as dependents."""

    def __init__(self, name: str, value: float) -> None:
        super().__init__(name)
        self._value = float(value)

    def evaluate(self) -> float:
        return self._value

    def leaf_variables(self) -> set[RealVariable]:
        return set()


class Formula(RealNode):
    """
    Node whose value is computed by a Python callable from its servers.

    The callable receives the current server values positionally.
    """

    def __init__(
        self,
        name: str,
        function: Callable[..., float],
        *servers: RealNode,
        title: Optional[str] = None
    ) -> None:
        super().__init__(name, title, servers)
        self.function = function

    def evaluate(self) -> float:
        return self.function(*(server.value() for server in self.servers))
