from enum import Enum


class UserRole(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"

    @staticmethod
    def from_claim(value: str | None) -> "UserRole | None":
        """
        Normalize a role claim such as "ROLE_ADMIN", "admin" or "ADMIN".

        Returns:
            UserRole or None if the claim does not name a known role
        """
        if not value or not isinstance(value, str):
            return None
        normalized = value.strip().upper()
        if normalized.startswith("ROLE_"):
            normalized = normalized[len("ROLE_"):]
        try:
            return UserRole(normalized)
        except ValueError:
            return None
