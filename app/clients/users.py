from __future__ import annotations

from app.core.errors import ErrorSource

from .base import ServiceClient


class UserRegistryClient(ServiceClient):
    """Existence checks against the user registry."""

    source = ErrorSource.USER_REGISTRY

    async def ensure_exists(self, user_id: int) -> None:
        await self._request(
            "GET",
            f"/Cadastro/{user_id}",
            not_found=f"User (CPF) {user_id} not found in the user registry",
        )
