"""
Building blocks shared by the Lodgify domain modules.

Domain modules do not inherit request plumbing; each one holds a
``ModuleContext`` that knows the owning client, the module's API version and
its base path, and forwards generic CRUD calls to ``client.request``.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol
from urllib.parse import quote

from lodgify_mcp.utils.exceptions import ValidationError

if TYPE_CHECKING:
    from lodgify_mcp.clients.orchestrator import ApiClientOrchestrator


class ApiModule(Protocol):
    """Capability every registered domain module exposes."""

    @property
    def name(self) -> str: ...

    @property
    def version(self) -> str: ...


ModuleFactory = Callable[["ApiClientOrchestrator"], ApiModule]


def encode_id(resource_id: str | int) -> str:
    """Percent-encode an identifier for safe use as a path segment."""
    return quote(str(resource_id), safe="")


@dataclass(frozen=True)
class ModuleContext:
    """Orchestrator reference plus routing data for one domain module."""

    client: "ApiClientOrchestrator"
    name: str
    version: str  # "v1", "v2" or "both"
    base_path: str

    def build_endpoint(self, path: str = "") -> str:
        clean_path = path.lstrip("/")
        if not self.base_path:
            return clean_path
        return f"{self.base_path}/{clean_path}" if clean_path else self.base_path

    async def request(self, method: str, path: str = "", **options: Any) -> Any:
        endpoint = self.build_endpoint(path)
        api_version = None if self.version == "both" else self.version
        options.setdefault("api_version", api_version)
        return await self.client.request(method, endpoint, **options)

    async def list(self, path: str = "", params: dict[str, Any] | None = None) -> Any:
        return await self.request("GET", path, params=params)

    async def get(self, path: str, resource_id: str | int) -> Any:
        return await self.request("GET", self._item_path(path, resource_id))

    async def create(self, path: str, data: Any) -> Any:
        if not data:
            raise ValidationError(
                "Request body is required", path=self.build_endpoint(path)
            )
        return await self.request("POST", path, body=data)

    async def update(self, path: str, resource_id: str | int, data: Any) -> Any:
        return await self.request(
            "PUT", self._item_path(path, resource_id), body=data
        )

    async def delete(self, path: str, resource_id: str | int) -> Any:
        return await self.request("DELETE", self._item_path(path, resource_id))

    def _item_path(self, path: str, resource_id: str | int) -> str:
        if resource_id is None or resource_id == "":
            raise ValidationError("ID is required", path=self.build_endpoint(path))
        item = encode_id(resource_id)
        return f"{path}/{item}" if path else item


class DomainModule:
    """Thin wrapper giving a domain module its name/version from its context."""

    def __init__(self, context: ModuleContext) -> None:
        self._ctx = context

    @property
    def name(self) -> str:
        return self._ctx.name

    @property
    def version(self) -> str:
        return self._ctx.version

    @property
    def client(self) -> "ApiClientOrchestrator":
        return self._ctx.client


class ModuleRegistry:
    """
    Lazily populated ``name -> module`` registry.

    Not thread-safe: ``get_or_create`` is a check-then-insert sequence and
    needs a lock if modules are ever registered from several threads.
    """

    def __init__(self, client: "ApiClientOrchestrator") -> None:
        self._client = client
        self._modules: dict[str, ApiModule] = {}

    def get_or_create(self, name: str, factory: ModuleFactory) -> ApiModule:
        module = self._modules.get(name)
        if module is None:
            module = factory(self._client)
            self._modules[name] = module
        return module

    def get(self, name: str) -> ApiModule | None:
        return self._modules.get(name)

    def has(self, name: str) -> bool:
        return name in self._modules

    def items(self) -> list[tuple[str, ApiModule]]:
        return list(self._modules.items())

    def all(self) -> list[ApiModule]:
        return list(self._modules.values())

    def clear(self) -> None:
        self._modules.clear()

    def __len__(self) -> int:
        return len(self._modules)
