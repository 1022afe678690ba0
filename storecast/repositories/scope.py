# storecast/repositories/scope.py
import uuid
from dataclasses import dataclass


@dataclass(frozen=True)
class DataScope:
    """
    Which rows a query may see.

    - elevated: service-level access, every row (service role key).
    - restricted: only rows owned by `user_id`, the same rule the
      row-level security policies apply to the anon key.
    """

    elevated: bool
    user_id: uuid.UUID | None = None

    @classmethod
    def service(cls) -> "DataScope":
        return cls(elevated=True)

    @classmethod
    def owner(cls, user_id: uuid.UUID) -> "DataScope":
        return cls(elevated=False, user_id=user_id)

    def apply(self, stmt, owner_column):
        """Add the ownership predicate unless elevated."""
        if self.elevated:
            return stmt
        return stmt.where(owner_column == self.user_id)
