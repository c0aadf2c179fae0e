"""Moderation domain — subject state machine and audit records.

    active ──suspend──> suspended ──(expiry)──> active
       │                   │
       └──────ban──────────┴──> banned ──reinstate──> active

warn never changes state. A banned subject must be reinstated before it can
be warned or suspended again. Reinstating an active subject is a no-op.
"""

from dataclasses import dataclass
from datetime import datetime

from src.rs_common.enums import ModerationAction, ModerationState
from src.rs_common.errors import InvalidModerationTransitionError

DEFAULT_SUSPENSION_DAYS = 7

# Log rows record the outcome, not the command
PAST_TENSE: dict[ModerationAction, str] = {
    ModerationAction.WARN: "warned",
    ModerationAction.SUSPEND: "suspended",
    ModerationAction.BAN: "banned",
    ModerationAction.REINSTATE: "reinstated",
}


@dataclass
class SubjectStatus:
    subject_type: str
    subject_id: int
    state: str = ModerationState.ACTIVE.value
    suspended_until: datetime | None = None

    def effective_state(self, now: datetime) -> ModerationState:
        state = ModerationState(self.state)
        if (
            state is ModerationState.SUSPENDED
            and self.suspended_until is not None
            and self.suspended_until <= now
        ):
            return ModerationState.ACTIVE
        return state


def next_state(current: ModerationState, action: ModerationAction) -> ModerationState:
    if action is ModerationAction.REINSTATE:
        return ModerationState.ACTIVE
    if action is ModerationAction.BAN:
        return ModerationState.BANNED
    if current is ModerationState.BANNED:
        raise InvalidModerationTransitionError(action.value, current.value)
    if action is ModerationAction.SUSPEND:
        return ModerationState.SUSPENDED
    return current


@dataclass
class ModerationCase:
    id: int
    case_type: str                 # free-form report category
    subject_type: str
    subject_id: int
    subject_name: str
    reporter_name: str
    reason: str
    status: str
    created_at: datetime | None = None


@dataclass
class ModerationLogEntry:
    id: int
    moderator: str
    action: str                    # past tense, see PAST_TENSE
    subject_type: str
    subject_id: int
    target_name: str
    reason: str
    duration_days: int | None = None
    created_at: datetime | None = None
