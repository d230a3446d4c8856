"""fieldknobs - Field validation with coercion, rule chains and per-field errors.

Loosely-typed input values (numbers of any width, strings, timestamps,
absent values, containers) are coerced into a fixed set of domains and
checked by composable rules. A session keeps exactly one error per field
and renders them in a deterministic order.

Modules:
    session: ValidationSession, the per-run error aggregator
    chain: RuleChain, the fluent per-field rule API
    predicates: Predicate library (Required, Min, IsEmail, MinDate, ...)
    coercer: Coercer for converting values into semantic domains
    domains: Domain enumeration and runtime domain detection
    result: FieldError value type
    settings: Settings for timestamp layouts and message templates
    exceptions: Exception hierarchy

Example:
    ```python
    from fieldknobs import ValidationSession

    session = ValidationSession()
    session.chain("username", form.get("username")).required().length(3, 20).is_alphanumeric()
    session.chain("age", form.get("age")).min(13).max(120)
    session.chain("birthday", form.get("birthday")).max_date("2010-01-01")
    session.chain("tags", form.get("tags")).max_count(5)

    error = session.result()
    if error is not None:
        print(error.render())  # "age: age must be at least 13, ..."
    ```
"""

from .chain import RuleChain
from .coercer import Coercer, Coercion
from .domains import Domain
from .exceptions import ConfigurationError, FieldknobsError, ValidationError
from .predicates import (
    BetweenDate,
    IsAlphanumeric,
    IsEmail,
    IsISO8601,
    IsISO8601Date,
    IsOnlyDigits,
    IsPhone,
    IsUUID,
    Length,
    Max,
    MaxCount,
    MaxDate,
    MaxLength,
    Min,
    MinCount,
    MinDate,
    MinLength,
    Numeric,
    OneOf,
    Predicate,
    Range,
    Required,
    Validator,
)
from .result import FieldError
from .session import ValidationSession
from .settings import Settings

__version__ = "0.1.0"

__all__ = [
    # Session and chains
    "ValidationSession",
    "RuleChain",
    # Results and errors
    "FieldError",
    "ValidationError",
    "FieldknobsError",
    "ConfigurationError",
    # Coercion
    "Coercer",
    "Coercion",
    "Domain",
    # Settings
    "Settings",
    # Predicates
    "Validator",
    "Predicate",
    "Required",
    "Min",
    "Max",
    "Range",
    "MinLength",
    "MaxLength",
    "Length",
    "OneOf",
    "IsEmail",
    "IsAlphanumeric",
    "IsISO8601",
    "IsISO8601Date",
    "IsPhone",
    "IsUUID",
    "IsOnlyDigits",
    "MinDate",
    "MaxDate",
    "BetweenDate",
    "MinCount",
    "MaxCount",
    "Numeric",
]
