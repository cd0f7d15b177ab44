"""Accumulating, type-driven validation for Python records.

This package provides:

- **Results**: ``Valid`` / ``Invalid`` with accumulating and fail-fast combinators
- **Errors**: Immutable ``ValidationError`` with field paths, codes and nested children
- **Validators**: Sync and async validators for scalars, optionals, collections,
  maps, unions and intersections, with configurable collection size limits
- **Derivation**: Record validators for dataclasses, NamedTuples and fixed
  tuples, resolved from a type-indexed registry
- **Hooks**: Opt-in observers and error translators

Example:
    ```python
    from dataclasses import dataclass
    from typing import Annotated

    from dataknobs_validation import NON_EMPTY_STRING, NON_NEGATIVE_INT, derive

    @dataclass
    class User:
        name: Annotated[str, NON_EMPTY_STRING]
        age: Annotated[int, NON_NEGATIVE_INT]

    result = derive(User).validate(User(name="", age=-1))
    for error in result.errors:
        print(error.pretty_print())
    ```
"""

from .accumulator import (
    DEFAULT_ACCUMULATOR,
    ErrorAccumulator,
    ListAccumulator,
    SetAccumulator,
    TupleAccumulator,
)
from .async_validator import (
    AsyncFrozenSetValidator,
    AsyncFunctionValidator,
    AsyncIntersectionValidator,
    AsyncListValidator,
    AsyncMapValidator,
    AsyncOptionalValidator,
    AsyncSequenceValidator,
    AsyncSetValidator,
    AsyncTupleValidator,
    AsyncUnionValidator,
    AsyncValidator,
    LiftedValidator,
)
from .config import (
    COLLECTION_TOO_LARGE,
    ValidationConfig,
    current_config,
    use_config,
)
from .derivation import (
    AsyncDerivedValidator,
    DerivedValidator,
    FieldDescriptor,
    RecordShape,
    RecordValidatorBuilder,
    derive,
    derive_async,
    derived,
    is_record_type,
)
from .errors import ValidationError
from .exceptions import (
    ConfigurationError,
    DerivationError,
    MissingValidator,
    NotFoundError,
    OperationError,
    ValidationEngineError,
    ValidationException,
)
from .helpers import (
    FINITE_FLOAT,
    NON_EMPTY_STRING,
    NON_NEGATIVE_INT,
    finite_float,
    in_range,
    max_length,
    min_length,
    non_empty,
    non_negative_int,
    one_of,
    option_validator,
    optional,
    regex_match,
    required,
)
from .observers import CallbackObserver, LoggingObserver, NoOpObserver, ValidationObserver
from .registry import ValidatorRegistry, builtin_registry, default_registry
from .result import (
    Failure,
    Invalid,
    Left,
    Right,
    Success,
    Valid,
    ValidationResult,
    from_callable,
    from_either,
    from_either_errors,
    invalid,
    sequence,
    valid,
)
from .translator import CodeTranslator, Translator
from .validator import (
    FrozenSetValidator,
    FunctionValidator,
    IntersectionValidator,
    ListValidator,
    MapValidator,
    OptionalValidator,
    PassThroughValidator,
    SequenceValidator,
    SetValidator,
    TupleValidator,
    UnionValidator,
    Validator,
    as_validator,
)

__version__ = "1.0.0"

__all__ = [
    # Version
    "__version__",
    # Errors
    "ValidationError",
    "ErrorAccumulator",
    "TupleAccumulator",
    "ListAccumulator",
    "SetAccumulator",
    "DEFAULT_ACCUMULATOR",
    # Results
    "ValidationResult",
    "Valid",
    "Invalid",
    "Left",
    "Right",
    "Success",
    "Failure",
    "valid",
    "invalid",
    "from_either",
    "from_either_errors",
    "from_callable",
    "sequence",
    # Configuration
    "ValidationConfig",
    "COLLECTION_TOO_LARGE",
    "current_config",
    "use_config",
    # Validators
    "Validator",
    "FunctionValidator",
    "as_validator",
    "PassThroughValidator",
    "OptionalValidator",
    "ListValidator",
    "TupleValidator",
    "SetValidator",
    "FrozenSetValidator",
    "SequenceValidator",
    "MapValidator",
    "IntersectionValidator",
    "UnionValidator",
    # Async validators
    "AsyncValidator",
    "AsyncFunctionValidator",
    "LiftedValidator",
    "AsyncOptionalValidator",
    "AsyncListValidator",
    "AsyncTupleValidator",
    "AsyncSetValidator",
    "AsyncFrozenSetValidator",
    "AsyncSequenceValidator",
    "AsyncMapValidator",
    "AsyncIntersectionValidator",
    "AsyncUnionValidator",
    # Helpers
    "non_empty",
    "non_negative_int",
    "finite_float",
    "min_length",
    "max_length",
    "regex_match",
    "in_range",
    "one_of",
    "required",
    "optional",
    "option_validator",
    "NON_EMPTY_STRING",
    "NON_NEGATIVE_INT",
    "FINITE_FLOAT",
    # Registry and derivation
    "ValidatorRegistry",
    "builtin_registry",
    "default_registry",
    "derive",
    "derive_async",
    "derived",
    "DerivedValidator",
    "AsyncDerivedValidator",
    "RecordValidatorBuilder",
    "RecordShape",
    "FieldDescriptor",
    "is_record_type",
    # Hooks
    "ValidationObserver",
    "NoOpObserver",
    "CallbackObserver",
    "LoggingObserver",
    "Translator",
    "CodeTranslator",
    # Exceptions
    "ValidationEngineError",
    "ValidationException",
    "DerivationError",
    "MissingValidator",
    "NotFoundError",
    "OperationError",
    "ConfigurationError",
]
