# pyright: reportAny=false, reportExplicitAny=false
"""Conversion of pydantic validation failures into stratum errors."""

import re
from typing import Never

from pydantic import ValidationError

from stratum.exceptions import ConfigValidationError

# Lowercase DNS-like labels, at least two of them
_REPOSITORY_NAME = re.compile(
    r"^[a-z0-9]([a-z0-9-]*[a-z0-9])?(\.[a-z0-9]([a-z0-9-]*[a-z0-9])?)+$"
)

MAX_REPOSITORY_NAME_LENGTH: int = 253


def raise_validation_error(
    error: ValidationError, *, source: str | None = None
) -> Never:
    """Re-raise the first pydantic error as ConfigValidationError.

    Args:
        error: The pydantic validation failure.
        source: Where the data came from (usually a file path).

    Raises:
        ConfigValidationError: Always.
    """
    details = error.errors()[0]
    key = ".".join(str(part) for part in details.get("loc", ()))
    message = str(details.get("msg", "Validation error"))
    where = f" in {source}" if source else ""
    raise ConfigValidationError(
        f"Invalid value for '{key}'{where}: {message}",
        key=key,
        value=details.get("input"),
        expected=message,
        source=source,
    ) from error


def validate_repository_name(name: str) -> str:
    """Validate a fully qualified repository name.

    Args:
        name: Candidate name, e.g. "acme.example.org".

    Returns:
        The name unchanged.

    Raises:
        ConfigValidationError: If the name is not a dotted lowercase DNS name.
    """
    if len(name) > MAX_REPOSITORY_NAME_LENGTH or not _REPOSITORY_NAME.match(name):
        msg = (
            f"Invalid repository name '{name}': expected a fully qualified name "
            "such as 'repo.example.org'"
        )
        raise ConfigValidationError(
            msg,
            key="name",
            value=name,
            expected="fully qualified DNS-like name",
        )
    return name
