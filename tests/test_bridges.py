"""
Tests for the GLPK, HiGHS and jsLPSolver bridges and the bridge registry.
"""

import asyncio
import math

import pytest

from lpmodel import Model
from lpmodel.bridges import (
    BridgeRegistry,
    EngineKind,
    GLPKBridge,
    HighsBridge,
    JSLPBridge,
    SolveStatus,
    get_bridge,
    list_bridges,
)
from lpmodel.bridges.glpk import column_bounds, row_bounds
from lpmodel.bridges.jslp import decode_status
from lpmodel.bridges.schemas import GLPK
from lpmodel.engines import FunctionEngine
from lpmodel.errors import (
    InvalidVariableSpec,
    LPModelError,
    QuadraticUnsupportedByBackend,
    UnknownEngineKind,
)


@pytest.fixture
def example_model():
    model = Model()
    x = model.add_var(vtype="BINARY", name="x")
    y = model.add_var(name="y")
    model.set_objective([[4, x], [5, y]], "MAXIMIZE")
    model.add_constr([x, [2, y], 3], "<=", 8)
    model.add_constr([[3, x], [4, y]], ">=", [12, [-1, x]])
    return model


@pytest.fixture
def quadratic_model():
    model = Model()
    x = model.add_var(name="x")
    model.set_objective([[1, x, x]], "MINIMIZE")
    return model


@pytest.fixture
def dashed_model():
    """A name that is fine in code but reads back as x - 1 in LP text."""
    model = Model()
    x = model.add_var(name="x-1")
    model.set_objective([x], "MAXIMIZE")
    model.add_constr([x], "<=", 3)
    return model


# =============================================================================
# GLPK
# =============================================================================

class TestGLPKEncode:
    """Model -> glpk.js problem object."""

    def test_example_request(self, example_model):
        request = GLPKBridge().encode(example_model)

        assert request["name"] == "LP"
        assert request["objective"] == {
            "direction": GLPK.GLP_MAX,
            "name": "obj",
            "vars": [{"name": "x", "coef": 4.0}, {"name": "y", "coef": 5.0}],
        }
        assert request["subjectTo"][0] == {
            "name": "cons1",
            "vars": [{"name": "x", "coef": 1.0}, {"name": "y", "coef": 2.0}],
            "bnds": {"type": GLPK.GLP_UP, "ub": 5.0, "lb": 0.0},
        }
        assert request["subjectTo"][1]["name"] == "cons2"
        assert request["subjectTo"][1]["bnds"] == {"type": GLPK.GLP_LO, "ub": 0.0, "lb": 12.0}
        assert request["binaries"] == ["x"]
        assert request["generals"] == []

    def test_minimize_direction(self):
        model = Model()
        x = model.add_var(name="x")
        model.set_objective([x], "MINIMIZE")
        assert GLPKBridge().encode(model)["objective"]["direction"] == GLPK.GLP_MIN

    def test_equality_row_is_fixed(self):
        bounds = row_bounds("=", 4)
        assert (bounds.type, bounds.lb, bounds.ub) == (GLPK.GLP_FX, 4, 4)

    @pytest.mark.parametrize("lb,ub,code,expected_lb,expected_ub", [
        (-math.inf, math.inf, GLPK.GLP_FR, 0, 0),
        (-math.inf, 7, GLPK.GLP_UP, 0, 7),
        (2, math.inf, GLPK.GLP_LO, 2, 0),
        (3, 3, GLPK.GLP_FX, 3, 3),
        (-1, 6, GLPK.GLP_DB, -1, 6),
    ])
    def test_column_bound_codes(self, lb, ub, code, expected_lb, expected_ub):
        bounds = column_bounds("v", lb, ub)
        assert (bounds.type, bounds.lb, bounds.ub) == (code, expected_lb, expected_ub)

    def test_integer_columns_are_generals(self):
        model = Model()
        model.add_var(name="n", vtype="INTEGER")
        model.add_var(name="b", vtype="BINARY")
        request = GLPKBridge().encode(model)
        assert request["generals"] == ["n"]
        assert request["binaries"] == ["b"]

    def test_objective_constant_not_sent(self):
        model = Model()
        x = model.add_var(name="x")
        model.set_objective([x, 2], "MAXIMIZE")
        assert GLPKBridge().encode(model)["objective"]["vars"] == [{"name": "x", "coef": 1.0}]

    def test_quadratic_rejected(self, quadratic_model):
        with pytest.raises(QuadraticUnsupportedByBackend) as excinfo:
            GLPKBridge().encode(quadratic_model)
        assert str(excinfo.value) == "GLPK does not support quadratic models."

    def test_names_sent_verbatim(self, dashed_model):
        request = GLPKBridge().encode(dashed_model)
        assert request["objective"]["vars"] == [{"name": "x-1", "coef": 1.0}]


def _glpk(status, z=None, vars=None, dual=None):
    result = {"status": status, "z": z, "vars": vars or {}}
    if dual is not None:
        result["dual"] = dual
    return {"name": "LP", "time": 0.01, "result": result}


class TestGLPKDecode:
    """glpk.js result -> model."""

    def test_optimal(self, example_model):
        result = GLPKBridge().decode(example_model, _glpk(GLPK.GLP_OPT, 14, {"x": 1, "y": 2}))
        assert result.status == SolveStatus.OPTIMAL
        assert example_model.status == "Optimal"
        assert example_model.variables["x"].value == 1
        assert example_model.variables["y"].value == 2
        assert example_model.objective_value == 14
        assert result.values == {"x": 1, "y": 2}
        assert not result.has_diagnostics

    @pytest.mark.parametrize("code,status", [
        (GLPK.GLP_UNDEF, "Undefined"),
        (GLPK.GLP_FEAS, "Feasible"),
        (GLPK.GLP_INFEAS, "Infeasible"),
        (GLPK.GLP_NOFEAS, "Infeasible"),
        (GLPK.GLP_UNBND, "Unbounded"),
        (99, "Undefined"),
    ])
    def test_status_codes(self, example_model, code, status):
        assert GLPKBridge().decode(example_model, _glpk(code)).status == status

    def test_no_values_without_solution(self, example_model):
        result = GLPKBridge().decode(example_model, _glpk(GLPK.GLP_NOFEAS, 0, {"x": 0}))
        assert example_model.variables["x"].value is None
        assert example_model.objective_value is None
        assert result.values == {}

    def test_constant_added_back(self):
        model = Model()
        x = model.add_var(name="x")
        model.set_objective([x, 2], "MAXIMIZE")
        result = GLPKBridge().decode(model, _glpk(GLPK.GLP_OPT, 3, {"x": 3}))
        assert result.objective_value == 5

    def test_duals_by_row_name(self, example_model):
        GLPKBridge().decode(
            example_model, _glpk(GLPK.GLP_OPT, 14, {"x": 1, "y": 2}, {"cons1": 2.5, "cons2": 0})
        )
        assert [c.dual for c in example_model.constraints] == [2.5, 0]

    def test_unknown_names_become_diagnostics(self, example_model):
        result = GLPKBridge().decode(
            example_model,
            _glpk(GLPK.GLP_OPT, 14, {"x": 1, "y": 2, "ghost": 3}, {"cons1": 0, "cons9": 1}),
        )
        diagnostics = [(d.kind, d.name) for d in result.diagnostics]
        assert diagnostics == [("variable", "ghost"), ("row", "cons9")]
        assert "ghost" not in result.values

    def test_invalid_response_rejected(self, example_model):
        with pytest.raises(Exception):
            GLPKBridge().decode(example_model, {"name": "LP"})


# =============================================================================
# HiGHS
# =============================================================================

class TestHighsBridge:
    """LP text request, HiGHS solution layout."""

    def test_encode_is_lp_text(self, example_model):
        assert HighsBridge().encode(example_model) == example_model.to_lp_format()

    def test_quadratic_accepted(self, quadratic_model):
        assert "[ 2 x * x ]/2" in HighsBridge().encode(quadratic_model)

    def test_unwritable_name_fails_encode(self, dashed_model):
        with pytest.raises(InvalidVariableSpec, match="x-1"):
            HighsBridge().encode(dashed_model)

    def test_unwritable_name_never_reaches_engine(self, dashed_model):
        requests = []
        engine = FunctionEngine("highs", lambda request, options: requests.append(request))
        with pytest.raises(InvalidVariableSpec):
            asyncio.run(dashed_model.solve(engine))
        assert requests == []
        assert dashed_model.status is None

    def test_decode_optimal(self, example_model):
        response = {
            "Status": "Optimal",
            "ObjectiveValue": 14,
            "Columns": {
                "x": {"Index": 0, "Name": "x", "Primal": 1, "Dual": 0},
                "y": {"Index": 1, "Name": "y", "Primal": 2, "Dual": 0},
            },
            "Rows": [
                {"Index": 0, "Name": "c1", "Primal": 5},
                {"Index": 1, "Name": "c2", "Primal": 12},
            ],
        }
        result = HighsBridge().decode(example_model, response)
        assert result.status == "Optimal"
        assert example_model.variables["y"].value == 2
        assert [c.primal for c in example_model.constraints] == [5, 12]
        assert [c.dual for c in example_model.constraints] == [None, None]
        assert result.objective_value == 14

    def test_objective_value_used_as_reported(self):
        model = Model()
        x = model.add_var(name="x")
        model.set_objective([x, 2], "MAXIMIZE")
        result = HighsBridge().decode(
            model, {"Status": "Optimal", "ObjectiveValue": 5, "Columns": {"x": {"Primal": 3}}}
        )
        assert result.objective_value == 5

    def test_native_status_kept(self, example_model):
        result = HighsBridge().decode(example_model, {"Status": "Time limit reached"})
        assert result.status == "Time limit reached"
        assert example_model.status == "Time limit reached"
        assert example_model.variables["x"].value is None

    def test_infeasible_reads_nothing(self, example_model):
        result = HighsBridge().decode(
            example_model, {"Status": "Infeasible", "Columns": {"x": {"Primal": 7}}}
        )
        assert result.values == {}
        assert example_model.objective_value is None

    def test_extra_rows_and_columns(self, example_model):
        response = {
            "Status": "Optimal",
            "ObjectiveValue": 14,
            "Columns": {"x": {"Primal": 1}, "y": {"Primal": 2}, "z": {"Primal": 0}},
            "Rows": [{"Primal": 5}, {"Primal": 12}, {"Name": "c3", "Primal": 0}],
        }
        result = HighsBridge().decode(example_model, response)
        assert [(d.kind, d.name) for d in result.diagnostics] == [("variable", "z"), ("row", "c3")]


# =============================================================================
# jsLPSolver
# =============================================================================

class TestJSLPEncode:
    """Model -> jsLPSolver model."""

    def test_example_request(self, example_model):
        request = JSLPBridge().encode(example_model, {"tolerance": 0.05})
        assert request["optimize"] == "objective"
        assert request["opType"] == "max"
        assert request["constraints"] == {"c0": {"max": 5}, "c1": {"min": 12}}
        assert request["variables"] == {
            "x": {"objective": 4, "c0": 1, "c1": 4},
            "y": {"objective": 5, "c0": 2, "c1": 4},
        }
        assert request["binaries"] == {"x": 1}
        assert request["ints"] == {}
        assert request["options"] == {"tolerance": 0.05}

    def test_bounds_become_rows(self):
        model = Model()
        model.add_var(name="a", lb=-2, ub=5)
        model.add_var(name="b", lb=3)
        model.add_var(name="f", lb="-infinity")
        model.set_objective([], "MINIMIZE")
        request = JSLPBridge().encode(model)

        assert request["opType"] == "min"
        assert request["constraints"] == {
            "a_lb": {"min": -2},
            "a_ub": {"max": 5},
            "b_lb": {"min": 3},
        }
        assert request["variables"]["a"] == {"a_lb": 1, "a_ub": 1}
        assert request["variables"]["b"] == {"b_lb": 1}
        assert request["variables"]["f"] == {}
        assert request["unrestricted"] == {"a": 1, "f": 1}

    def test_integer_marks(self):
        model = Model()
        model.add_var(name="n", vtype="INTEGER", ub=4)
        request = JSLPBridge().encode(model)
        assert request["ints"] == {"n": 1}
        assert request["constraints"] == {"n_ub": {"max": 4}}

    def test_equality_row(self):
        model = Model()
        x = model.add_var(name="x")
        model.add_constr([x], "=", 2)
        assert JSLPBridge().encode(model)["constraints"] == {"c0": {"equal": 2}}

    def test_quadratic_rejected(self, quadratic_model):
        with pytest.raises(QuadraticUnsupportedByBackend):
            JSLPBridge().encode(quadratic_model)


class TestJSLPDecode:
    """Flat jsLPSolver result -> model."""

    @pytest.mark.parametrize("feasible,bounded,status", [
        (True, True, "Optimal"),
        (True, None, "Optimal"),
        (False, True, "Infeasible"),
        (True, False, "Unbounded"),
        (None, None, "Undefined"),
    ])
    def test_decode_status(self, feasible, bounded, status):
        assert decode_status(feasible, bounded) == status

    def test_missing_variables_are_zero(self, example_model):
        result = JSLPBridge().decode(
            example_model, {"feasible": True, "result": 10, "bounded": True, "y": 2}
        )
        assert result.status == "Optimal"
        assert example_model.variables["x"].value == 0
        assert example_model.variables["y"].value == 2
        assert result.objective_value == 10

    def test_infeasible(self, example_model):
        result = JSLPBridge().decode(
            example_model, {"feasible": False, "result": 0, "bounded": True}
        )
        assert result.status == "Infeasible"
        assert example_model.variables["x"].value is None
        assert example_model.objective_value is None

    def test_constant_added_back(self):
        model = Model()
        x = model.add_var(name="x")
        model.set_objective([x, -1.5], "MINIMIZE")
        result = JSLPBridge().decode(model, {"feasible": True, "result": 4, "x": 4})
        assert result.objective_value == 2.5

    def test_unknown_variable(self, example_model):
        result = JSLPBridge().decode(
            example_model, {"feasible": True, "result": 14, "x": 1, "y": 2, "w": 1}
        )
        assert [(d.kind, d.name) for d in result.diagnostics] == [("variable", "w")]
        assert example_model.diagnostics == []  # only set by Model.read_solution/solve


# =============================================================================
# Registry
# =============================================================================

class TestBridgeRegistry:
    """Lookup by engine kind."""

    def test_builtin_bridges(self):
        assert isinstance(get_bridge(EngineKind.GLPK), GLPKBridge)
        assert isinstance(get_bridge("HIGHS"), HighsBridge)
        assert isinstance(get_bridge("jslp"), JSLPBridge)

    def test_unknown_kind(self):
        assert get_bridge("cplex") is None
        assert get_bridge(None) is None

    def test_model_rejects_unknown_kind(self, example_model):
        with pytest.raises(UnknownEngineKind) as excinfo:
            example_model.to_request("cplex")
        assert isinstance(excinfo.value, LPModelError)
        assert excinfo.value.kind == "cplex"
        assert "glpk" in str(excinfo.value)

    def test_list_bridges(self):
        bridges = list_bridges()
        assert set(bridges) == {"glpk", "highs", "jslp"}
        assert bridges["highs"]["supports_quadratic"] is True
        assert bridges["glpk"]["objective_includes_constant"] is False

    def test_register_replaces_kind(self):
        class LoudGLPK(GLPKBridge):
            @property
            def name(self):
                return "Loud GLPK"

        registry = BridgeRegistry()
        registry.register(LoudGLPK())
        assert registry.get("glpk").name == "Loud GLPK"
        assert registry.kinds() == ["glpk", "highs", "jslp"]

    def test_read_solution_records_diagnostics(self, example_model):
        result = example_model.read_solution(
            "glpk", _glpk(GLPK.GLP_OPT, 14, {"x": 1, "y": 2, "ghost": 0})
        )
        assert example_model.diagnostics == result.diagnostics
        assert result.to_dict()["diagnostics"][0]["name"] == "ghost"
        assert result.to_dict()["engine_kind"] == "glpk"
