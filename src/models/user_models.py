"""Pydantic models for Facebook user profiles (no consent required)."""

from typing import Optional

from pydantic import BaseModel


class FacebookUserInfo(BaseModel):
    """Profile fields returned by the Graph API for a PSID."""

    id: str
    name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    @property
    def display_name(self) -> Optional[str]:
        """Full name if present, else first + last joined, else None."""
        if self.name and self.name.strip():
            return self.name.strip()
        parts = [p.strip() for p in (self.first_name, self.last_name) if p and p.strip()]
        joined = " ".join(parts)
        return joined or None
