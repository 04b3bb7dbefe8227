"""
Rule data models for the access-rules evaluator.
"""

from typing import Any, Callable, Dict, Hashable, List, Optional, Tuple
from dataclasses import dataclass, field
from enum import Enum

from shared.config import get_settings
from shared.logging import get_logger
from shared.metrics import get_metrics_collector

WILDCARD = "*"

Predicate = Callable[[Any, Any, Dict[str, Any]], bool]

logger = get_logger("access_rules.rules")


def is_wildcard(value: Any) -> bool:
    """Whether ``value`` is the universal wildcard."""
    return isinstance(value, str) and value == WILDCARD


def category_of(subject: Any) -> type:
    """The category a concrete subject belongs to."""
    return type(subject)


def is_category(subject: Any) -> bool:
    """Whether the queried subject is itself a category rather than an instance."""
    return isinstance(subject, type)


class ConditionScope(str, Enum):
    """Which queried subjects a condition applies to."""
    ANY = "any"
    INSTANCE = "instance"
    CATEGORY = "category"


@dataclass(frozen=True)
class Condition:
    """Runtime predicate narrowing when a rule applies.

    The predicate is always called as ``predicate(user, subject, options)``.
    A scoped condition counts as satisfied when the queried subject is
    outside its scope: an INSTANCE condition is not consulted for a class
    and a CATEGORY condition is not consulted for an instance.
    """
    predicate: Predicate
    scope: ConditionScope = ConditionScope.ANY
    description: Optional[str] = None

    def applies_to(self, subject: Any) -> bool:
        if self.scope == ConditionScope.INSTANCE:
            return not is_category(subject)
        if self.scope == ConditionScope.CATEGORY:
            return is_category(subject)
        return True

    def __call__(self, user: Any, subject: Any, options: Dict[str, Any]) -> bool:
        if not self.applies_to(subject):
            return True
        return bool(self.predicate(user, subject, options))


@dataclass(frozen=True)
class Rule:
    """One grant or denial for an action/subject pair, agnostic of role."""
    grants: bool
    action: Hashable
    subject: Hashable
    conditions: Tuple[Condition, ...] = ()

    @property
    def is_denial(self) -> bool:
        return not self.grants

    def action_matches(self, action: Any) -> bool:
        return action == self.action or is_wildcard(action) or is_wildcard(self.action)

    def subject_matches(self, subject: Any) -> bool:
        return (
            subject == self.subject
            or category_of(subject) == self.subject
            or is_wildcard(subject)
            or is_wildcard(self.subject)
        )

    def match(self, action: Any, subject: Any, user: Any, options: Optional[Dict[str, Any]] = None) -> bool:
        """Check the rule's action, subject and conditions against a query."""
        if not self.action_matches(action):
            return False
        if not self.subject_matches(subject):
            return False

        return self._conditions_match(user, subject, options or {})

    def _conditions_match(self, user: Any, subject: Any, options: Dict[str, Any]) -> bool:
        try:
            return all(condition(user, subject, options) for condition in self.conditions)
        except Exception as e:
            # Fails closed; never propagated to the caller
            logger.error(
                "Condition evaluation failed",
                action=repr(self.action),
                subject=repr(subject),
                error=str(e),
                exc_info=True
            )
            if get_settings().metrics_enabled:
                get_metrics_collector().record_condition_error(type(e).__name__)
            return False


@dataclass
class Decision:
    """Result of an authorization query."""
    allowed: bool
    reason: str
    role: Optional[Hashable] = None
    # Granting rule on an allow, the denials on a veto
    matched_rules: List[Rule] = field(default_factory=list)
    evaluation_time_ms: float = 0.0

    def __bool__(self) -> bool:
        return self.allowed
