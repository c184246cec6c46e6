"""
Request/response schemas of the external engines, using Pydantic.

Three engine families are covered:
- GLPK:  glpk.js style JSON (direction code, typed bound records)
- HiGHS: LP text request, named column map + row list response
- jsLP:  jsLPSolver style sparse maps, flat response

Decoders accept either these models or plain dicts (validated on entry).
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# GLPK
# =============================================================================

class GLPK:
    """Numeric codes of the GLPK API."""

    # Direction
    GLP_MIN = 1
    GLP_MAX = 2

    # Bound type of rows and columns
    GLP_FR = 1  # free
    GLP_LO = 2  # lower bound only
    GLP_UP = 3  # upper bound only
    GLP_DB = 4  # double bounded
    GLP_FX = 5  # fixed

    # Solution status
    GLP_UNDEF = 1
    GLP_FEAS = 2
    GLP_INFEAS = 3
    GLP_NOFEAS = 4
    GLP_OPT = 5
    GLP_UNBND = 6


class GLPKTerm(BaseModel):
    """One coefficient of an objective or row."""

    name: str
    coef: float


class GLPKBounds(BaseModel):
    """Typed bound record; the unused side carries a 0 placeholder."""

    type: int = Field(..., ge=GLPK.GLP_FR, le=GLPK.GLP_FX, description="GLP_FR..GLP_FX")
    ub: float = 0
    lb: float = 0


class GLPKObjective(BaseModel):
    direction: int = Field(..., description="GLP_MAX or GLP_MIN")
    name: str = "obj"
    vars: List[GLPKTerm] = Field(default_factory=list)


class GLPKRow(BaseModel):
    name: str
    vars: List[GLPKTerm] = Field(default_factory=list)
    bnds: GLPKBounds


class GLPKColumnBounds(GLPKBounds):
    name: str


class GLPKRequest(BaseModel):
    """
    glpk.js problem object.

    Example:
        >>> GLPKRequest(
        ...     objective=GLPKObjective(direction=GLPK.GLP_MAX,
        ...                             vars=[GLPKTerm(name="x", coef=1)]),
        ...     subjectTo=[GLPKRow(name="cons1", vars=[GLPKTerm(name="x", coef=1)],
        ...                        bnds=GLPKBounds(type=GLPK.GLP_UP, ub=3))],
        ... )
    """

    name: str = "LP"
    objective: GLPKObjective
    subjectTo: List[GLPKRow] = Field(default_factory=list)
    bounds: List[GLPKColumnBounds] = Field(default_factory=list)
    binaries: List[str] = Field(default_factory=list)
    generals: List[str] = Field(default_factory=list)


class GLPKResult(BaseModel):
    model_config = ConfigDict(extra="allow")

    status: int
    z: Optional[float] = None
    vars: Dict[str, float] = Field(default_factory=dict)
    dual: Optional[Dict[str, float]] = Field(
        None, description="Row duals by row name (simplex solves only)"
    )


class GLPKResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str = "LP"
    time: float = 0
    result: GLPKResult


# =============================================================================
# HiGHS
# =============================================================================

class HighsColumn(BaseModel):
    model_config = ConfigDict(extra="allow")

    Primal: Optional[float] = None
    Dual: Optional[float] = None
    Index: Optional[int] = None
    Name: Optional[str] = None


class HighsRow(BaseModel):
    model_config = ConfigDict(extra="allow")

    Name: Optional[str] = None
    Primal: Optional[float] = None
    Dual: Optional[float] = Field(None, description="Present for continuous solves only")
    Index: Optional[int] = None


class HighsResponse(BaseModel):
    """HiGHS solution: native status string plus named columns and ordered rows."""

    model_config = ConfigDict(extra="allow")

    Status: str
    ObjectiveValue: Optional[float] = None
    Columns: Dict[str, HighsColumn] = Field(default_factory=dict)
    Rows: List[HighsRow] = Field(default_factory=list)


# =============================================================================
# jsLPSolver
# =============================================================================

class JSLPRequest(BaseModel):
    """
    jsLPSolver model.

    constraints maps a row name to {"max"|"min"|"equal": rhs}; variables maps
    a variable name to its coefficient in the objective and in each row.
    """

    optimize: str = "objective"
    opType: str = Field(..., pattern="^(max|min)$")
    constraints: Dict[str, Dict[str, float]] = Field(default_factory=dict)
    variables: Dict[str, Dict[str, float]] = Field(default_factory=dict)
    ints: Dict[str, int] = Field(default_factory=dict)
    binaries: Dict[str, int] = Field(default_factory=dict)
    unrestricted: Dict[str, int] = Field(default_factory=dict)
    options: Dict[str, Any] = Field(default_factory=dict)


class JSLPResponse(BaseModel):
    """
    Flat jsLPSolver result.

    Variable values are extra top-level keys; variables left out are zero.
    """

    model_config = ConfigDict(extra="allow")

    feasible: Optional[bool] = None
    result: Optional[float] = None
    bounded: Optional[bool] = None
    isIntegral: Optional[bool] = None

    def variable_values(self) -> Dict[str, Any]:
        """Variable values reported by the solver."""
        return dict(self.model_extra or {})
