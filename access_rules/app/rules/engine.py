"""
Role-level resolution for the access-rules evaluator.
"""

from typing import Any, Dict, Hashable, List, Optional
from dataclasses import dataclass, field
from enum import Enum

from .models import Rule
from .repository import RuleIndex


class RoleVerdict(str, Enum):
    """What a single role says about a query."""
    VETO = "veto"
    GRANT = "grant"
    NONE = "none"


@dataclass
class RoleOutcome:
    """Verdict of one role plus the rules behind it."""
    role: Hashable
    verdict: RoleVerdict
    rules: List[Rule] = field(default_factory=list)


def resolve_role(
    index: RuleIndex,
    role: Hashable,
    action: Any,
    subject: Any,
    user: Any,
    options: Optional[Dict[str, Any]] = None
) -> RoleOutcome:
    """Decide what ``role`` says about (action, subject) for ``user``.

    A denial whose action/subject pattern applies vetoes the role outright,
    without consulting any condition. Otherwise the role grants when at
    least one granting rule matches, conditions included.
    """
    gathered = index.gather(role, action, subject)

    denials = [rule for rule in gathered if rule.is_denial]
    if denials:
        return RoleOutcome(role=role, verdict=RoleVerdict.VETO, rules=denials)

    options = options or {}
    for rule in gathered:
        if rule.match(action, subject, user, options):
            return RoleOutcome(role=role, verdict=RoleVerdict.GRANT, rules=[rule])

    return RoleOutcome(role=role, verdict=RoleVerdict.NONE)
