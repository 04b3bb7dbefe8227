"""
access-rules: in-process role-based authorization.

Example:
    >>> from access_rules import PermissionSet, Authorizer
    >>> admins = PermissionSet("admins")
    >>> with admins.role("admin") as role:
    ...     role.can_do_anything()
    >>> Authorizer(admins, user, role_supplier=lambda u: u.roles).can("delete", "report")
    True
"""

from .app.authorizer import Authorizer
from .app.dsl import RoleBuilder
from .app.permissions import PermissionSet
from .app.rules.models import Condition, ConditionScope, Decision, Rule, WILDCARD
from .app.rules.repository import RuleIndex

__all__ = [
    "Authorizer",
    "Condition",
    "ConditionScope",
    "Decision",
    "PermissionSet",
    "RoleBuilder",
    "Rule",
    "RuleIndex",
    "WILDCARD",
]
