"""
Moderation state machine.

``transition`` never raises: an illegal (status, action) pair comes back as
an ``IllegalTransition`` value that callers turn into a StateConflictError.
"""

import enum
from dataclasses import dataclass
from typing import Union

from mediahub.core.exceptions import StateConflictError
from mediahub.models.publication import PublicationStatus


class Action(str, enum.Enum):
    SUBMIT = "submit"
    APPROVE = "approve"
    REJECT = "reject"
    UNPUBLISH = "unpublish"


# Status each action leads to
ACTION_TARGETS = {
    Action.SUBMIT: PublicationStatus.PENDING,
    Action.APPROVE: PublicationStatus.APPROVED,
    Action.REJECT: PublicationStatus.REJECTED,
    Action.UNPUBLISH: PublicationStatus.DRAFT,
}

ALLOWED = {
    (PublicationStatus.DRAFT, Action.SUBMIT),
    (PublicationStatus.PENDING, Action.APPROVE),
    (PublicationStatus.PENDING, Action.REJECT),
    (PublicationStatus.APPROVED, Action.UNPUBLISH),
    (PublicationStatus.REJECTED, Action.UNPUBLISH),
}


@dataclass(frozen=True)
class Transition:
    current: PublicationStatus
    target: PublicationStatus
    action: Action


@dataclass(frozen=True)
class IllegalTransition:
    current: PublicationStatus
    target: PublicationStatus
    action: Action

    def to_error(self) -> StateConflictError:
        return StateConflictError(
            self.current.value, self.target.value, self.action.value
        )


def transition(
    current: Union[PublicationStatus, str], action: Union[Action, str]
) -> Union[Transition, IllegalTransition]:
    current = PublicationStatus(current)
    action = Action(action)
    target = ACTION_TARGETS[action]
    if (current, action) in ALLOWED:
        return Transition(current=current, target=target, action=action)
    return IllegalTransition(current=current, target=target, action=action)
