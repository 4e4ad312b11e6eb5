from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel


def _column_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def patch_fields(patch: BaseModel) -> Dict[str, Any]:
    # Only what the client actually sent; absent keys leave the row untouched
    return {k: _column_value(v) for k, v in patch.model_dump(exclude_unset=True).items()}


def apply_patch(entity: Any, patch: BaseModel) -> Dict[str, Any]:
    changes = patch_fields(patch)
    for field, value in changes.items():
        setattr(entity, field, value)
    return changes
