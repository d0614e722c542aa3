from uuid import UUID

from pydantic import BaseModel


class CurrentUser(BaseModel):
    """Authenticated caller. Role-specific permissions are enforced by the external policy layer."""

    id: UUID
    role: str
