"""Base model class for all ddlflow models with serialization support."""

from typing import Any, Dict
from pydantic import BaseModel, ConfigDict


class FlowBaseModel(BaseModel):
    """Base model for all ddlflow models with built-in serialization.

    Provides common functionality for all ddlflow models including:
    - Serialization to dictionary via to_dict()
    - Consistent configuration
    - Proper handling of nested models
    """
    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        use_enum_values=False,
        validate_assignment=True
    )

    def to_dict(self) -> Dict[str, Any]:
        """Convert model to dictionary for serialization.

        Recursively converts nested FlowBaseModel instances to dictionaries
        and enums to their values.

        Returns:
            Dictionary representation suitable for JSON serialization
        """
        data = self.model_dump(by_alias=False, exclude_none=True)

        def convert_nested(obj):
            if isinstance(obj, FlowBaseModel):
                return obj.to_dict()
            elif isinstance(obj, dict):
                return {k: convert_nested(v) for k, v in obj.items()}
            elif isinstance(obj, list):
                return [convert_nested(item) for item in obj]
            elif hasattr(obj, 'value'):  # Handle enums
                return obj.value
            return obj

        return convert_nested(data)
