"""Who may perform which action on user accounts.

Each action maps to an ``AccessRule``; the rule is checked in two stages.
``may_access`` runs before any lookup and covers the credential kind and
the role. ``may_act_on`` runs once the target account is known and covers
ownership. A role-gated action therefore rejects non-admins even for ids
that do not exist, while an ownership-gated one reports a missing id first.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from ..models import User, UserRole
from .credentials import CredentialKind


class UserAction(str, Enum):
    AUTHENTICATE = "authenticate"
    LIST = "list"
    READ_SELF = "read_self"
    READ = "read"
    CREATE = "create"
    UPDATE_SELF = "update_self"
    UPDATE = "update"
    CHANGE_OWN_PASSWORD = "change_own_password"
    CHANGE_PASSWORD = "change_password"
    DELETE = "delete"


class Ownership(str, Enum):
    ANY = "any"
    SELF = "self"
    SELF_OR_ADMIN = "self_or_admin"


@dataclass(frozen=True, slots=True)
class AccessRule:
    """``credential=None`` marks a public action."""

    credential: CredentialKind | None
    role: UserRole | None = None
    ownership: Ownership = Ownership.ANY


POLICY: Mapping[UserAction, AccessRule] = MappingProxyType(
    {
        UserAction.AUTHENTICATE: AccessRule(CredentialKind.PASSWORD),
        UserAction.LIST: AccessRule(CredentialKind.TOKEN, role=UserRole.ADMIN),
        UserAction.READ_SELF: AccessRule(CredentialKind.TOKEN),
        UserAction.READ: AccessRule(None),
        # Registration is open and honours a requested role, admin included.
        UserAction.CREATE: AccessRule(None),
        UserAction.UPDATE_SELF: AccessRule(CredentialKind.TOKEN),
        UserAction.UPDATE: AccessRule(CredentialKind.TOKEN, ownership=Ownership.SELF_OR_ADMIN),
        UserAction.CHANGE_OWN_PASSWORD: AccessRule(CredentialKind.PASSWORD),
        UserAction.CHANGE_PASSWORD: AccessRule(CredentialKind.PASSWORD, ownership=Ownership.SELF),
        UserAction.DELETE: AccessRule(CredentialKind.TOKEN, role=UserRole.ADMIN),
    }
)


def rule_for(action: UserAction) -> AccessRule:
    return POLICY[action]


def may_access(
    action: UserAction,
    requester: User | None,
    credential_kind: CredentialKind | None,
) -> bool:
    """Whether ``requester``, authenticated via ``credential_kind``, may attempt ``action``."""
    rule = POLICY[action]
    if rule.credential is None:
        return True
    if requester is None or credential_kind is not rule.credential:
        return False
    return rule.role is None or requester.role == rule.role


def may_act_on(action: UserAction, requester: User | None, target_id: str) -> bool:
    """Whether ``requester`` may perform ``action`` on the account ``target_id``."""
    rule = POLICY[action]
    if rule.ownership is Ownership.ANY:
        return True
    if requester is None:
        return False
    if requester.id == target_id:
        return True
    return rule.ownership is Ownership.SELF_OR_ADMIN and requester.is_admin


__all__ = [
    "AccessRule",
    "Ownership",
    "POLICY",
    "UserAction",
    "may_access",
    "may_act_on",
    "rule_for",
]
