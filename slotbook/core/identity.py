from dataclasses import dataclass

from slotbook.core.enums import Role


@dataclass(frozen=True)
class Actor:
    """Authenticated caller as supplied by the identity provider."""

    user_id: str
    role: Role = Role.USER

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
