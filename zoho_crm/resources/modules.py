"""Module metadata operations."""

from typing import Any

from ..core.errors import ResourceNotFound
from ..core.models import HttpMethod, ModuleInfo
from ..http.builder import OperationBuilder
from .base import Resource


class ModulesResource(Resource):
    """Read the CRM's module definitions (settings/modules)."""

    def list(self, timeout: float | None = None) -> list[ModuleInfo]:
        """
        List all modules visible to the authenticated user.

        Returns:
            ModuleInfo for each module, in API order
        """
        operation = (
            OperationBuilder()
            .method(HttpMethod.GET)
            .path("settings", "modules")
            .timeout(timeout)
            .build()
        )
        return self._execute(operation, _decode_modules)

    def get(self, api_name: str, timeout: float | None = None) -> ModuleInfo:
        """
        Fetch the metadata of one module.

        Raises:
            ResourceNotFound: If no module has that API name
        """
        operation = (
            OperationBuilder()
            .method(HttpMethod.GET)
            .path("settings", "modules", api_name)
            .timeout(timeout)
            .build()
        )

        def decode(payload: Any) -> ModuleInfo:
            modules = _decode_modules(payload)
            if not modules:
                raise ResourceNotFound(f"Module '{api_name}' not found")
            return modules[0]

        return self._execute(operation, decode)


def _decode_modules(payload: Any) -> list[ModuleInfo]:
    if payload is None:
        return []
    return [ModuleInfo.from_dict(item) for item in payload["modules"]]
