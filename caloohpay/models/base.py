"""Base models for all data models in CalOohPay.

This module provides the base Pydantic models with common configuration
shared by the domain models and the models parsed from API payloads.
"""

from pydantic import BaseModel, ConfigDict


class BaseDataModel(BaseModel):
    """Base class for domain data models.

    Provides common configuration for:
    - Validation with type checking
    - Serialization to/from dictionaries
    - Arbitrary types support for datetimes and decimals

    Example:
        >>> class User(BaseDataModel):
        ...     name: str
        ...     age: int
        >>> user = User(name="Alice", age=30)
        >>> user.name
        'Alice'
        >>> user.model_dump()
        {'name': 'Alice', 'age': 30}
    """

    model_config = ConfigDict(
        # Allow arbitrary types like Decimal and datetime
        arbitrary_types_allowed=True,
        # Validate on assignment to catch errors early
        validate_assignment=True,
        strict=False,
        # Unknown fields are programming errors for domain models
        extra="forbid",
        frozen=False,
    )


class ApiDataModel(BaseModel):
    """Base class for models parsed from PagerDuty API responses.

    API payloads carry many fields CalOohPay does not use, so unknown
    fields are ignored instead of rejected.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        strict=False,
        extra="ignore",
        frozen=True,
    )
