"""Base model for all kvfilecache Pydantic models.

This module provides a base model class that enforces consistent serialization
behavior across all kvfilecache models.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict


class KvFileCacheBaseModel(BaseModel):
    """Base model class for all kvfilecache Pydantic models.

    This class enforces consistent serialization behavior:
    - by_alias=True: Use field aliases for serialization
    - mode="json": Use JSON-compatible serialization
    """

    model_config = ConfigDict(
        # Unknown fields are accepted and dropped
        extra="ignore",
        # Allow population by field name as well as alias
        populate_by_name=True,
        # Use enum values in serialization
        use_enum_values=True,
        # Validate assignment after model creation
        validate_assignment=True,
    )

    def to_dict(self) -> dict[str, Any]:
        """Convert model to dictionary with consistent serialization parameters.

        Returns:
            Dictionary representation using JSON-compatible serialization
        """
        return self.model_dump(by_alias=True, mode="json")
