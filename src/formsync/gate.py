from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from formsync.auth import IdentityState, workspace_for
from formsync.cache import FetchState
from formsync.errors import FormsyncError, NotAuthenticated, Unauthorized


class Decision(str, Enum):
    LOADING = "loading"
    ERROR = "error"
    UNAUTHORIZED = "unauthorized"
    AUTHORIZED = "authorized"


@dataclass(frozen=True)
class GateResult:
    decision: Decision
    error: Exception | None = None

    @property
    def allowed(self) -> bool:
        return self.decision is Decision.AUTHORIZED

    def raise_for_decision(self) -> None:
        if self.decision is Decision.LOADING:
            raise RuntimeError("gate evaluated before its inputs resolved")
        if self.error is not None:
            raise self.error


def evaluate(
    form_state: FetchState,
    identity_state: IdentityState,
    *extra: FetchState,
) -> GateResult:
    """Decide whether the fetched form may be shown to the current identity.

    Precedence is loading, then error, then unauthorized, then authorized.
    ``extra`` read states (responses on the dashboard) only take part in the
    loading and error checks.
    """
    reads = (form_state, *extra)
    if identity_state.is_loading or any(state.is_loading for state in reads):
        return GateResult(Decision.LOADING)

    if identity_state.error is not None:
        error = identity_state.error
        if not isinstance(error, FormsyncError):
            error = NotAuthenticated(str(error))
        return GateResult(Decision.ERROR, error)
    for state in reads:
        if state.error is not None:
            return GateResult(Decision.ERROR, state.error)

    form = form_state.data
    requester = workspace_for(identity_state.identity)
    if form.workspace != requester:
        return GateResult(Decision.UNAUTHORIZED, Unauthorized(form.id, requester))
    return GateResult(Decision.AUTHORIZED)
