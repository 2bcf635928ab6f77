"""Field metadata operations."""

from typing import Any

from ..core.models import FieldInfo, HttpMethod
from ..http.builder import OperationBuilder
from .base import Resource


class FieldsResource(Resource):
    """Read field definitions of a module (settings/fields)."""

    def list(self, module: str, timeout: float | None = None) -> list[FieldInfo]:
        """
        List the fields of a module.

        Args:
            module: Module API name (e.g. "Leads")

        Returns:
            FieldInfo for each field
        """
        operation = (
            OperationBuilder()
            .method(HttpMethod.GET)
            .path("settings", "fields")
            .param("module", module)
            .timeout(timeout)
            .build()
        )
        return self._execute(operation, _decode_fields)


def _decode_fields(payload: Any) -> list[FieldInfo]:
    if payload is None:
        return []
    return [FieldInfo.from_dict(item) for item in payload["fields"]]
