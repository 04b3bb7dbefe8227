"""
Rule index for the access-rules evaluator.

Rules are stored per role in insertion order (the authoritative view) and
indexed per role by subject, then by action, for retrieval at query time.
"""

from typing import Any, Dict, Hashable, Iterable, List, Optional

from shared.logging import get_logger
from .models import Rule, Condition, WILDCARD, is_wildcard, category_of


class RuleIndex:
    """Rules grouped by role and indexed by subject and action."""

    def __init__(self):
        self.logger = get_logger("access_rules.repository")
        self.rules_by_role: Dict[Hashable, List[Rule]] = {}
        self.lookup: Dict[Hashable, Dict[Hashable, Dict[Hashable, List[Rule]]]] = {}

    def add_rule(
        self,
        role: Hashable,
        grants: bool,
        action: Hashable,
        subject: Hashable,
        conditions: Iterable[Condition] = ()
    ) -> Rule:
        """Construct a rule and index it under ``role``."""
        rule = Rule(grants=grants, action=action, subject=subject, conditions=tuple(conditions))
        self.insert(role, rule)
        return rule

    def insert(self, role: Hashable, rule: Rule) -> None:
        """Index an existing rule under ``role``."""
        self.rules_by_role.setdefault(role, []).append(rule)
        by_subject = self.lookup.setdefault(role, {})
        by_action = by_subject.setdefault(rule.subject, {})
        by_action.setdefault(rule.action, []).append(rule)

    def gather(self, role: Hashable, action: Hashable, subject: Any) -> List[Rule]:
        """Collect every rule that may apply to (action, subject) for ``role``.

        Precedence: exact subject and action, wildcard subject and action,
        wildcard subject with the exact action, exact subject with any
        action. Concrete subjects are also looked up by their category.
        Duplicates are kept.
        """
        rules: List[Rule] = []
        rules += self._find(role, action, subject)
        rules += self._find(role, WILDCARD, WILDCARD)
        rules += self._find(role, action, WILDCARD)
        rules += self._find(role, WILDCARD, subject)
        return rules

    def rules_for(self, role: Hashable, action: Hashable, subject: Any) -> List[Rule]:
        """Rules applicable to (action, subject) for ``role`` after the negation veto.

        Within one role, any denial among the gathered rules cancels all of
        them, whether or not the denial's own conditions would hold.
        """
        rules = self.gather(role, action, subject)
        if any(rule.is_denial for rule in rules):
            return []
        return rules

    def merge(self, other: "RuleIndex") -> "RuleIndex":
        """Append every rule of ``other`` under the same roles."""
        for role, rules in other.rules_by_role.items():
            for rule in rules:
                self.insert(role, rule)
        return self

    def copy_into(self, role: Hashable, other: "RuleIndex") -> "RuleIndex":
        """Append every rule of every role of ``other`` under the single ``role``."""
        for rules in other.rules_by_role.values():
            for rule in rules:
                self.insert(role, rule)
        self.logger.debug(
            "Rules copied into role",
            role=repr(role),
            source_roles=[repr(r) for r in other.roles()],
            rules=len(other)
        )
        return self

    def roles(self) -> List[Hashable]:
        return list(self.rules_by_role)

    def rules_for_role(self, role: Hashable) -> List[Rule]:
        return list(self.rules_by_role.get(role, ()))

    def __len__(self) -> int:
        return sum(len(rules) for rules in self.rules_by_role.values())

    def stats(self) -> Dict[str, Any]:
        """Get index statistics."""
        all_rules = [rule for rules in self.rules_by_role.values() for rule in rules]
        return {
            "total_rules": len(all_rules),
            "grants": len([r for r in all_rules if r.grants]),
            "denials": len([r for r in all_rules if r.is_denial]),
            "roles": {repr(role): len(rules) for role, rules in self.rules_by_role.items()}
        }

    def _find(self, role: Hashable, action: Hashable, subject: Any) -> List[Rule]:
        by_subject = self.lookup.get(role)
        if not by_subject:
            return []

        rules = list(self._lookup_actions(by_subject, subject, action))
        if not is_wildcard(subject):
            rules += self._lookup_actions(by_subject, category_of(subject), action)
        return rules

    @staticmethod
    def _lookup_actions(
        by_subject: Dict[Hashable, Dict[Hashable, List[Rule]]],
        subject: Any,
        action: Hashable
    ) -> List[Rule]:
        try:
            by_action: Optional[Dict[Hashable, List[Rule]]] = by_subject.get(subject)
        except TypeError:
            # Unhashable subjects can never be index keys
            return []
        if not by_action:
            return []
        try:
            return by_action.get(action, [])
        except TypeError:
            return []
