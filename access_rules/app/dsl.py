"""
Rule-authoring surface for a single role.
"""

from typing import Any, Callable, Hashable, Iterable, List, Optional, Tuple

from .rules.models import Condition, ConditionScope, WILDCARD
from .rules.repository import RuleIndex


def _as_list(values: Any) -> List[Any]:
    if isinstance(values, (list, tuple, set, frozenset)):
        return list(values)
    return [values]


def build_conditions(
    when: Any = None,
    when_instance: Any = None,
    when_category: Any = None
) -> Tuple[Condition, ...]:
    """Turn condition arguments into Condition objects.

    Anything that is not callable is dropped, as if no condition had been
    given.
    """
    conditions = []
    for predicate, scope in (
        (when, ConditionScope.ANY),
        (when_instance, ConditionScope.INSTANCE),
        (when_category, ConditionScope.CATEGORY),
    ):
        if isinstance(predicate, Condition):
            conditions.append(predicate)
        elif callable(predicate):
            conditions.append(Condition(
                predicate=predicate,
                scope=scope,
                description=getattr(predicate, "__doc__", None)
            ))
    return tuple(conditions)


class RoleBuilder:
    """Collects the rules of one role into a fresh RuleIndex.

    Example:
        >>> role = RoleBuilder("member")
        >>> role.can("create", "member_stuff")
        >>> role.can("update", Post, when=lambda user, post, options: user.id == post.user_id)
        >>> @role.can_if("*", "with_block")
        ... def owns(user, record, options):
        ...     return record.id == 5
    """

    def __init__(self, role_identifier: Hashable):
        self.role_identifier = role_identifier
        self.rule_index = RuleIndex()

    def can_do_anything(self) -> None:
        self.rule_index.add_rule(self.role_identifier, True, WILDCARD, WILDCARD)

    def can(
        self,
        actions: Any,
        subjects: Any,
        when: Optional[Callable] = None,
        *,
        when_instance: Optional[Callable] = None,
        when_category: Optional[Callable] = None
    ) -> None:
        """Grant every action on every subject."""
        self._add(True, actions, subjects, build_conditions(when, when_instance, when_category))

    def cannot(
        self,
        actions: Any,
        subjects: Any,
        when: Optional[Callable] = None,
        *,
        when_instance: Optional[Callable] = None,
        when_category: Optional[Callable] = None
    ) -> None:
        """Deny every action on every subject."""
        self._add(False, actions, subjects, build_conditions(when, when_instance, when_category))

    def can_if(self, actions: Any, subjects: Any) -> Callable[[Callable], Callable]:
        """Decorator form of ``can``; the decorated function is the condition."""
        def decorator(predicate: Callable) -> Callable:
            self.can(actions, subjects, predicate)
            return predicate
        return decorator

    def cannot_if(self, actions: Any, subjects: Any) -> Callable[[Callable], Callable]:
        """Decorator form of ``cannot``."""
        def decorator(predicate: Callable) -> Callable:
            self.cannot(actions, subjects, predicate)
            return predicate
        return decorator

    def _add(self, grants: bool, actions: Any, subjects: Any, conditions: Iterable[Condition]) -> None:
        conditions = tuple(conditions)
        for action in _as_list(actions):
            for subject in _as_list(subjects):
                self.rule_index.add_rule(self.role_identifier, grants, action, subject, conditions)
