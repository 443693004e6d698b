"""Unit tests for the additive resolution model"""
import logging

import pytest

from resolutionmodels import config
from resolutionmodels.core.basis import BasisFunction, DecayType
from resolutionmodels.core.node import Constant, Formula, RealVariable
from resolutionmodels.errors import ConfigurationError, ProgrammingError
from resolutionmodels.models.add_model import AddModel
from resolutionmodels.models.gauss_model import GaussModel
from resolutionmodels.models.truth_model import TruthModel

from conftest import Owner, StubModel, degeneracy_records


def make_three(x, c1=0.3, c2=0.2):
    a = StubModel("A", x, 1.0)
    b = StubModel("B", x, 2.0)
    c = StubModel("C", x, 4.0)
    coef1 = RealVariable("c1", c1, 0.0, 1.0)
    coef2 = RealVariable("c2", c2, 0.0, 1.0)
    return AddModel("sum", [a, b, c], [coef1, coef2]), coef1, coef2


# --- construction -----------------------------------------------------------

def test_coefficient_count_must_be_one_less_than_models(x):
    """Test size mismatch is rejected"""
    a = StubModel("A", x, 1.0)
    b = StubModel("B", x, 2.0)

    with pytest.raises(ConfigurationError):
        AddModel("sum", [a, b], [0.1, 0.2])
    with pytest.raises(ConfigurationError):
        AddModel("sum", [a, b], [])
    with pytest.raises(ConfigurationError):
        AddModel("sum", [], [])


def test_single_model_without_coefficients(x):
    """Test N=1 composite reproduces its only component"""
    a = StubModel("A", x, 3.0)
    model = AddModel("sum", [a], [])

    assert model.value() == pytest.approx(3.0)
    assert model.last_coefficient() == 1.0


def test_components_must_be_resolution_models(x):
    """Test a plain node is not accepted as component"""
    with pytest.raises(TypeError):
        AddModel("sum", [StubModel("A", x, 1.0), Constant("k", 1.0)], [0.5])


def test_coefficients_must_be_real_nodes(x):
    """Test a non-numeric coefficient is rejected"""
    with pytest.raises(TypeError):
        AddModel("sum", [StubModel("A", x, 1.0), StubModel("B", x, 1.0)], ["half"])


def test_components_must_share_convolution_variable(x, y):
    """Test convolution variable mismatch is rejected"""
    with pytest.raises(ConfigurationError):
        AddModel("sum", [StubModel("A", x, 1.0), StubModel("B", y, 1.0)], [0.5])


def test_pairing_preserves_input_order(x):
    """Test models and coefficients keep their positions"""
    model, coef1, coef2 = make_three(x)

    assert [m.name for m in model.models] == ["A", "B", "C"]
    assert model.coefficients == [coef1, coef2]
    assert model.conv_var is x


def test_numeric_coefficients_are_wrapped(x):
    """Test plain numbers become constants"""
    model = AddModel("sum", [StubModel("A", x, 1.0), StubModel("B", x, 3.0)], [0.25])

    assert isinstance(model.coefficients[0], Constant)
    assert model.value() == pytest.approx(0.25 * 1.0 + 0.75 * 3.0)


# --- evaluation ---------------------------------------------------------------

def test_evaluate_blends_components(x, warnings_log):
    """Test 0.3*A + 0.2*B + 0.5*C"""
    model, _, _ = make_three(x)

    assert model.value() == pytest.approx(0.3 * 1.0 + 0.2 * 2.0 + 0.5 * 4.0)
    assert model.last_coefficient() == pytest.approx(0.5)
    assert degeneracy_records(warnings_log) == []
    assert model.degeneracy_warning_count == 0


def test_evaluate_degenerate_coefficients_not_clamped(x, warnings_log):
    """Test coefficients summing above one give the raw blend and one warning"""
    model, coef1, coef2 = make_three(x)
    coef1.set_value(0.7)
    coef2.set_value(0.6)

    assert model.last_coefficient() == pytest.approx(-0.3)
    assert model.value() == pytest.approx(0.7 * 1.0 + 0.6 * 2.0 - 0.3 * 4.0)
    assert len(degeneracy_records(warnings_log)) == 1
    assert model.degeneracy_warning_count == 1


def test_coefficients_summing_to_one(x, warnings_log):
    """Test last coefficient is zero and no warning is printed"""
    model, _, _ = make_three(x, 0.5, 0.5)

    assert model.last_coefficient() == 0.0
    assert model.value() == pytest.approx(0.5 * 1.0 + 0.5 * 2.0)
    assert degeneracy_records(warnings_log) == []


def test_evaluate_warnings_are_rate_limited(x, warnings_log):
    """Test only the first warnings of an instance are printed"""
    model, _, _ = make_three(x, 0.9, 0.9)

    for _ in range(config.MAX_DEGENERACY_WARNINGS + 5):
        model.value()

    records = degeneracy_records(warnings_log)
    assert len(records) == config.MAX_DEGENERACY_WARNINGS
    assert model.degeneracy_warning_count == config.MAX_DEGENERACY_WARNINGS
    assert "no more will be printed" in records[-1].getMessage()
    assert "no more will be printed" not in records[0].getMessage()


def test_negative_last_coefficient_below_zero_sum(x, warnings_log):
    """Test negative coefficients push the last weight above one"""
    model, _, _ = make_three(x, -0.5, 0.1)

    assert model.last_coefficient() == pytest.approx(1.4)
    assert model.value() == pytest.approx(-0.5 * 1.0 + 0.1 * 2.0 + 1.4 * 4.0)
    assert len(degeneracy_records(warnings_log)) == 1


def test_clone_resets_warning_counter(x, warnings_log):
    """Test copies start with a fresh counter and do not own components"""
    model, _, _ = make_three(x, 0.9, 0.9)
    model.value()

    copy = model.clone("copy")
    assert copy.name == "copy"
    assert copy.degeneracy_warning_count == 0
    assert copy.models == model.models
    assert not copy.owns_components


# --- normalization ------------------------------------------------------------

def test_get_norm_without_basis_uses_negotiated_integral(x):
    """Test plain composite is normalized via its own analytic integral"""
    mean = Constant("mean", 0.5)
    narrow = GaussModel("narrow", x, mean, Constant("s1", 0.5))
    wide = GaussModel("wide", x, mean, Constant("s2", 1.5))
    model = AddModel("sum", [narrow, wide], [0.3])

    assert model.get_norm({x}) == pytest.approx(1.0, rel=1e-9)
    assert len(model.code_registry) == 1
    assert model.code_registry.retrieve(1) == (1, 1)


def test_get_norm_without_norm_set_is_one(x):
    """Test unnormalized use"""
    model, _, _ = make_three(x)

    assert model.get_norm(None) == 1.0
    assert model.get_norm(set()) == 1.0


def test_get_val_divides_by_norm(x):
    """Test normalized value of a plain composite"""
    x.set_value(0.5)
    g1 = GaussModel("g1", x, Constant("m", 0.0), Constant("s1", 1.0))
    g2 = GaussModel("g2", x, Constant("m2", 0.0), Constant("s2", 2.0))
    model = AddModel("sum", [g1, g2], [0.6])

    expected = model.value() / model.get_norm({x})
    assert model.get_val({x}) == pytest.approx(expected)


def test_convolved_norms_use_separate_caches(t):
    """Test get_norm and get_norm_special keep independent integral caches"""
    tau = Constant("tau", 2.0)
    basis = BasisFunction.decay(t, tau)
    model = AddModel("sum", [TruthModel("t1", t), TruthModel("t2", t)], [0.4])
    conv = model.convolution(basis, Owner("decay"))

    norm = conv.get_norm({t})
    component = conv.models[0]
    assert len(component._norm_integrals) == 1
    assert len(component._special_norm_integrals) == 0

    special = conv.get_norm_special({t})
    assert len(component._special_norm_integrals) == 1
    key = frozenset({t})
    assert component._norm_integrals[key] is not component._special_norm_integrals[key]
    assert special == pytest.approx(norm)


def test_convolved_norm_blends_component_norms(t):
    """Test weighted sum of component normalizations"""
    tau = Constant("tau", 2.0)
    basis = BasisFunction.decay(t, tau)
    t1 = StubModel("s1", t, 1.0, integrals={frozenset({"t"}): 1})
    t2 = StubModel("s2", t, 1.0, integrals={frozenset({"t"}): 1})
    model = AddModel("sum", [t1, t2], [0.25])
    conv = model.convolution(basis, Owner("decay"))

    conv.models[0].level = 2.0
    conv.models[1].level = 6.0
    assert conv.get_norm({t}) == pytest.approx(0.25 * 2.0 + 0.75 * 6.0)
    assert conv.get_norm_special({t}) == pytest.approx(0.25 * 2.0 + 0.75 * 6.0)


def test_convolved_norm_warns_every_call(t, warnings_log):
    """Test normalization warnings are not rate limited"""
    basis = BasisFunction.decay(t, Constant("tau", 1.0))
    model = AddModel("sum", [TruthModel("t1", t), TruthModel("t2", t)], [1.5])
    conv = model.convolution(basis, Owner("decay"))

    n_calls = config.MAX_DEGENERACY_WARNINGS + 3
    for _ in range(n_calls):
        conv.get_norm({t})

    assert len(degeneracy_records(warnings_log)) == n_calls


# --- analytic integration -----------------------------------------------------

def test_common_analytic_set_is_intersection(x, y):
    """Test A integrates {x}, B integrates {x,y}: only {x} is common"""
    a = StubModel("A", x, 1.0, integrals={frozenset({"x"}): 2})
    b = StubModel("B", x, 1.0, integrals={frozenset({"x"}): 3, frozenset({"x", "y"}): 5})
    model = AddModel("sum", [a, b], [0.5])

    code, anal_vars = model.get_analytical_integral_wn({x, y})

    assert code == 1
    assert anal_vars == {x}
    assert model.code_registry.retrieve(code) == (2, 3)


def test_negotiation_is_stable(x, y):
    """Test repeated requests decode to the same component codes"""
    a = StubModel("A", x, 1.0, integrals={frozenset({"x"}): 2})
    b = StubModel("B", x, 1.0, integrals={frozenset({"x"}): 3})
    model = AddModel("sum", [a, b], [0.5])

    first, _ = model.get_analytical_integral_wn({x, y})
    second, _ = model.get_analytical_integral_wn({x, y})

    assert model.code_registry.retrieve(first) == model.code_registry.retrieve(second)


def test_no_common_variables(x, y):
    """Test disjoint capabilities yield code 0"""
    a = StubModel("A", x, 1.0, integrals={frozenset({"x"}): 1})
    b = StubModel("B", x, 1.0, integrals={frozenset({"y"}): 1})
    model = AddModel("sum", [a, b], [0.5])

    assert model.get_analytical_integral_wn({x, y}) == (0, set())
    assert len(model.code_registry) == 0


def test_inconsistent_component_disables_analytic_path(x, y, warnings_log):
    """Test component supporting only the joint (x,y) integral"""
    a = StubModel("A", x, 1.0, integrals={frozenset({"x"}): 1})
    joint = StubModel("J", x, 1.0, integrals={frozenset({"x", "y"}): 4})
    # Reports x and y in the first pass, but cannot integrate x alone
    model = AddModel("sum", [a, joint], [0.5])

    assert model.get_analytical_integral_wn({x, y}) == (0, set())
    assert len(model.code_registry) == 0
    assert any("inconsistent" in r.getMessage() for r in warnings_log.records)


def test_convolved_composite_offers_no_analytic_integral(t):
    """Test analytic negotiation is only done for plain composites"""
    basis = BasisFunction.decay(t, Constant("tau", 1.0))
    model = AddModel("sum", [TruthModel("t1", t), TruthModel("t2", t)], [0.5])
    conv = model.convolution(basis, Owner("decay"))

    assert conv.get_analytical_integral_wn({t}) == (0, set())
    assert not conv.force_analytical_int(t)
    assert model.force_analytical_int(t)


def test_analytical_integral_blends_component_integrals(x):
    """Test integral uses component sub-codes and coefficient algebra"""
    a = StubModel("A", x, 1.0, integrals={frozenset({"x"}): 2})
    b = StubModel("B", x, 10.0, integrals={frozenset({"x"}): 3})
    model = AddModel("sum", [a, b], [RealVariable("f", 0.2, 0.0, 1.0)])

    code, _ = model.get_analytical_integral_wn({x})

    assert model.analytical_integral_wn(code) == pytest.approx(0.2 * 1.0 * 2 + 0.8 * 10.0 * 3)


def test_analytical_integral_code_zero_is_value(x):
    """Test code 0 shortcut"""
    model, _, _ = make_three(x)

    assert model.analytical_integral_wn(0) == model.value()


def test_unknown_integration_code_raises(x):
    """Test codes never issued are programming errors"""
    model, _, _ = make_three(x)

    with pytest.raises(ProgrammingError):
        model.analytical_integral_wn(1)
    with pytest.raises(ProgrammingError):
        model.analytical_integral_wn(-2)


def test_analytical_integral_warns_every_call(x, warnings_log):
    """Test integral warnings are not rate limited"""
    a = StubModel("A", x, 1.0, integrals={frozenset({"x"}): 1})
    b = StubModel("B", x, 1.0, integrals={frozenset({"x"}): 1})
    model = AddModel("sum", [a, b], [1.2])
    code, _ = model.get_analytical_integral_wn({x})

    n_calls = config.MAX_DEGENERACY_WARNINGS + 2
    for _ in range(n_calls):
        model.analytical_integral_wn(code)

    assert len(degeneracy_records(warnings_log)) == n_calls


def test_nested_composites(x):
    """Test a composite can be a component of another composite"""
    inner = AddModel("inner", [StubModel("A", x, 1.0), StubModel("B", x, 3.0)], [0.5])
    outer = AddModel("outer", [inner, StubModel("C", x, 10.0)], [0.4])

    assert outer.value() == pytest.approx(0.4 * 2.0 + 0.6 * 10.0)


# --- dependents ---------------------------------------------------------------

def test_check_dependents_detects_shared_variable(t, x, y, caplog):
    """Test coefficient depending on x with model depending on {x,y}"""
    caplog.set_level(logging.ERROR, logger="resolutionmodels")
    coef = Formula("coef", lambda v: 0.5 + 0.01 * v, x)
    model = AddModel("sum", [StubModel("M", t, 1.0, params=[x, y]), StubModel("N", t, 1.0)], [coef])

    assert model.check_dependents() is True
    assert any("dependents in common" in r.getMessage() for r in caplog.records)


def test_check_dependents_without_overlap(t, x, y):
    """Test coefficient depending on x with model depending on {y}"""
    coef = Formula("coef", lambda v: 0.5 + 0.01 * v, x)
    model = AddModel("sum", [StubModel("M", t, 1.0, params=[y]), StubModel("N", t, 1.0, params=[x])], [coef])

    assert model.check_dependents() is False


def test_check_dependents_restricted_to_observables(t, x, y):
    """Test overlap outside the observable set is ignored"""
    coef = Formula("coef", lambda v: 0.5, x)
    model = AddModel("sum", [StubModel("M", t, 1.0, params=[x]), StubModel("N", t, 1.0)], [coef])

    assert model.check_dependents({t, y}) is False
    assert model.check_dependents({t, x}) is True


# --- basis functions and convolution --------------------------------------------

def test_basis_code_requires_all_components(x):
    """Test basis support is the intersection of the components"""
    a = StubModel("A", x, 1.0, basis_codes={DecayType.SINGLE_SIDED: 4, DecayType.FLIPPED: 5})
    b = StubModel("B", x, 1.0, basis_codes={DecayType.SINGLE_SIDED: 7})
    model = AddModel("sum", [a, b], [0.5])

    assert model.basis_code(DecayType.SINGLE_SIDED) == 4
    assert model.basis_code(DecayType.FLIPPED) == 0
    assert model.basis_code("cos(@0*@1)") == 0


def test_convolution_clones_models_and_shares_coefficients(t):
    """Test asymmetric ownership of the convolution"""
    tau = Constant("tau", 1.5)
    basis = BasisFunction.decay(t, tau)
    coef = RealVariable("f", 0.3, 0.0, 1.0)
    t1 = TruthModel("t1", t)
    t2 = TruthModel("t2", t)
    model = AddModel("sum", [t1, t2], [coef])

    conv = model.convolution(basis, Owner("decay"))

    assert conv.coefficients[0] is coef
    assert all(new is not old for new, old in zip(conv.models, model.models))
    assert all(m.basis is basis for m in conv.models)
    assert conv.basis is basis
    assert conv.active_basis_code == 1
    assert conv.owns_components
    assert not model.owns_components
    assert not model.is_convolved
    assert conv.name == "sum_conv_exp(-@0/@1)_[decay]"
    assert "convoluted with basis function exp(-@0/@1)" in conv.title


def test_convolution_value_tracks_shared_coefficient(t):
    """Test changing the shared coefficient affects the convolution"""
    tau = Constant("tau", 1.0)
    basis = BasisFunction.decay(t, tau)
    coef = RealVariable("f", 0.3, 0.0, 1.0)
    model = AddModel(
        "sum",
        [StubModel("A", t, 1.0), StubModel("B", t, 5.0)],
        [coef]
    )
    conv = model.convolution(basis, Owner("decay"))

    coef.set_value(0.9)
    assert conv.value() == pytest.approx(0.9 * 1.0 + 0.1 * 5.0)


def test_convolution_rejects_basis_in_other_variable(t, x):
    """Test basis primary variable must be the convolution variable"""
    basis = BasisFunction.decay(x, Constant("tau", 1.0))
    model = AddModel("sum", [TruthModel("t1", t), TruthModel("t2", t)], [0.5])

    with pytest.raises(ConfigurationError):
        model.convolution(basis, Owner("decay"))


def test_convolution_rejects_unsupported_basis(t):
    """Test basis unknown to the components"""
    basis = BasisFunction("cos(@0*@1)", lambda v, w: v * w, t, Constant("w", 1.0))
    model = AddModel("sum", [TruthModel("t1", t), TruthModel("t2", t)], [0.5])

    with pytest.raises(ConfigurationError):
        model.convolution(basis, Owner("decay"))
