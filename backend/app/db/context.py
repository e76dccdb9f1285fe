"""Request context identifying who is calling."""

from dataclasses import dataclass
from uuid import UUID

from backend.app.models.common import Audience


@dataclass(frozen=True)
class RequestContext:
    """Request context containing user or guest session identity.

    Authenticated requests carry a user ID; guests are identified by their
    browser session only. All repository access and usage counting is scoped
    by this context.
    """

    user_id: UUID | None
    session_id: str = "anonymous"

    @property
    def is_guest(self) -> bool:
        """True when the caller is not signed in."""
        return self.user_id is None

    @property
    def audience(self) -> Audience:
        """Audience used to pick feature limits."""
        return Audience.guest if self.is_guest else Audience.authenticated
