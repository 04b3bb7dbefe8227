"""
Authorization decisions for a single user.
"""

import time
from typing import Any, Callable, Dict, Hashable, Iterable, List, Optional

from shared.config import get_settings
from shared.errors import AccessDeniedError
from shared.logging import get_logger
from shared.metrics import get_metrics_collector
from .permissions import PermissionSet
from .rules.engine import RoleVerdict, resolve_role
from .rules.models import Decision

RoleSupplier = Callable[[Any], Iterable[Hashable]]


class Authorizer:
    """Answers "can this user do action A on subject S?".

    Roles are evaluated in the order the host returns them. The first role
    holding an applicable denial ends the decision with a denial; the first
    role with a matching grant ends it with an allow. Subclasses may
    override ``user_role_identifiers`` instead of passing ``role_supplier``.
    """

    def __init__(
        self,
        permissions: PermissionSet,
        user: Any,
        role_supplier: Optional[RoleSupplier] = None
    ):
        self.permissions = permissions
        self.user = user
        self._role_supplier = role_supplier
        self.logger = get_logger("access_rules.authorizer")

    def user_role_identifiers(self) -> List[Hashable]:
        if self._role_supplier is None:
            return []
        roles = self._role_supplier(self.user) or []
        if isinstance(roles, (str, bytes)):
            return [roles]
        return list(roles)

    def evaluate(self, action: Any, subject: Any, options: Optional[Dict[str, Any]] = None) -> Decision:
        """Evaluate a query and explain the outcome."""
        start_time = time.perf_counter()
        index = self.permissions.rule_index
        options = options or {}

        decision = Decision(allowed=False, reason="no rule granted")
        for role in self.user_role_identifiers():
            outcome = resolve_role(index, role, action, subject, self.user, options)

            if outcome.verdict == RoleVerdict.VETO:
                decision = Decision(allowed=False, reason="vetoed", role=role, matched_rules=outcome.rules)
                break

            if outcome.verdict == RoleVerdict.GRANT:
                decision = Decision(allowed=True, reason="granted", role=role, matched_rules=outcome.rules)
                break

        elapsed = time.perf_counter() - start_time
        decision.evaluation_time_ms = elapsed * 1000

        self.logger.debug(
            "Authorization decision",
            action=repr(action),
            subject=repr(subject),
            allowed=decision.allowed,
            reason=decision.reason,
            role=repr(decision.role)
        )
        if get_settings().metrics_enabled:
            get_metrics_collector().record_decision(decision.allowed, decision.reason, elapsed)

        return decision

    def can(self, action: Any, subject: Any, options: Optional[Dict[str, Any]] = None) -> bool:
        return self.evaluate(action, subject, options).allowed

    def cannot(self, action: Any, subject: Any, options: Optional[Dict[str, Any]] = None) -> bool:
        return not self.can(action, subject, options)

    def authorize(self, action: Any, subject: Any, options: Optional[Dict[str, Any]] = None) -> Decision:
        """Return the decision, raising AccessDeniedError when it is a denial."""
        decision = self.evaluate(action, subject, options)
        if not decision.allowed:
            raise AccessDeniedError(action, subject, decision.reason)
        return decision
