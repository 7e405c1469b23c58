from .exceptions import (
    ParameterError,
    ParameterSpecError,
    ExpressionError,
)
from .specs import (
    Number, Choice, ParamSpec, clamp, coerce_parameters, default_parameters, validate_specs,
)
from .expressions import compile_waveform_expression, EXPRESSION_VARIABLES

__all__ = [
    # Exceptions
    "ParameterError",
    "ParameterSpecError",
    "ExpressionError",
    # Declarations & coercion
    "Number",
    "Choice",
    "ParamSpec",
    "clamp",
    "coerce_parameters",
    "default_parameters",
    "validate_specs",
    # Expressions
    "compile_waveform_expression",
    "EXPRESSION_VARIABLES",
]
