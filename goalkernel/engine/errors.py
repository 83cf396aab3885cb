"""Engine error taxonomy. Only goal validation can fail."""

from __future__ import annotations


class ValidationError(ValueError):
    """A goal's configuration is malformed (unit/type/required-field mismatch)."""

    def __init__(self, goal_id: str, errors: list[str]):
        self.goal_id = goal_id
        self.errors = list(errors)
        super().__init__(f"Goal {goal_id} is invalid: {'; '.join(self.errors)}")
