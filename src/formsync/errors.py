from __future__ import annotations


class FormsyncError(Exception):
    """Base class for failures scoped to a single view or action."""


class NotAuthenticated(FormsyncError):
    """Identity resolution failed, or no identity where one is required."""


class Unauthorized(FormsyncError):
    """The form belongs to another workspace."""

    def __init__(self, form_id: str, workspace: str | None) -> None:
        super().__init__(f"workspace {workspace} may not access form {form_id}")
        self.form_id = form_id
        self.workspace = workspace


class NotFound(FormsyncError):
    def __init__(self, form_id: str) -> None:
        super().__init__(f"form {form_id} not found")
        self.form_id = form_id


class FetchFailed(FormsyncError):
    """Transport or server error on a read."""


class MutationFailed(FormsyncError):
    """Transport or server error on a write."""


class ValidationFailed(FormsyncError):
    def __init__(self, messages: list[str]) -> None:
        super().__init__("; ".join(messages) or "invalid form payload")
        self.messages = messages


__all__ = [
    "FormsyncError",
    "NotAuthenticated",
    "Unauthorized",
    "NotFound",
    "FetchFailed",
    "MutationFailed",
    "ValidationFailed",
]
