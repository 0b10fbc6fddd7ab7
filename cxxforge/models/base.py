"""Base model for all cxxforge Pydantic models.

This module provides a base model class that enforces consistent serialization
behavior across all cxxforge models.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict


class CxxforgeBaseModel(BaseModel):
    """Base model class for all cxxforge Pydantic models.

    Models describing build inputs are immutable: a descriptor handed to a
    pipeline must read the same for the whole invocation.
    """

    model_config = ConfigDict(
        extra="forbid",
        str_strip_whitespace=True,
        use_enum_values=False,
        frozen=True,
    )

    def to_dict(self) -> dict[str, Any]:
        """Convert model to dictionary with consistent serialization parameters.

        Returns:
            Dictionary representation using JSON-compatible serialization
        """
        return self.model_dump(by_alias=True, exclude_unset=False, mode="json")

    def to_dict_python(self) -> dict[str, Any]:
        """Convert model to dictionary using Python serialization."""
        return self.model_dump(by_alias=True, exclude_unset=False, mode="python")
