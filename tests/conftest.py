"""Shared fixtures and test doubles."""
from __future__ import annotations

import logging

import pytest

from resolutionmodels.core.basis import DecayType
from resolutionmodels.core.node import RealVariable
from resolutionmodels.models.resolution_model import ResolutionModel


class StubModel(ResolutionModel):
    """
    Resolution model with a fixed value and a configurable table of analytic integrals.

    `integrals` maps frozensets of variable names to integration codes. The
    analytic integral for code `c` evaluates to `level * c`.
    """

    def __init__(self, name, x, level, params=(), integrals=None, basis_codes=None):
        super().__init__(name, x, servers=params)
        self.level = level
        self.integrals = integrals or {}
        self.basis_codes = basis_codes if basis_codes is not None else {DecayType.SINGLE_SIDED: 1}

    def basis_code(self, basis_name):
        return self.basis_codes.get(basis_name, 0)

    def evaluate(self):
        return self.level

    def get_analytical_integral_wn(self, all_vars, norm_set=None):
        names = {var.name for var in all_vars}
        best = max(
            (key for key in self.integrals if key <= names),
            key=len,
            default=None
        )
        if best is None:
            return 0, set()
        return self.integrals[best], {var for var in all_vars if var.name in best}

    def analytical_integral_wn(self, code, norm_set=None):
        if code == 0:
            return self.value()
        return self.level * code


class Owner:
    def __init__(self, name):
        self.name = name


@pytest.fixture
def x():
    return RealVariable("x", 0.0, -10.0, 10.0)


@pytest.fixture
def y():
    return RealVariable("y", 0.0, -1.0, 1.0)


@pytest.fixture
def t():
    return RealVariable("t", 1.0, 0.0, 10.0, unit="ps")


@pytest.fixture
def warnings_log(caplog):
    caplog.set_level(logging.WARNING, logger="resolutionmodels")
    return caplog


def degeneracy_records(caplog):
    return [r for r in caplog.records if "not in range [0-1]" in r.getMessage()]
