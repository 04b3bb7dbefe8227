"""
Permission sets: named, composable collections of role rules.
"""

import threading
from contextlib import contextmanager
from typing import Callable, Hashable, Iterator, Optional

from shared.config import get_settings
from shared.errors import PermissionsFrozenError, RuleDefinitionError
from shared.logging import get_logger
from .dsl import RoleBuilder
from .rules.repository import RuleIndex


class PermissionSet:
    """Accumulates one RuleIndex across role definitions.

    A set is open for definition until it is frozen. Reading ``rule_index``
    freezes it, so every authorizer sees a fully built, read-only index.
    A ``definer`` callable defers definition until that first read; it runs
    exactly once even when the first reads race, and a definer that raises
    leaves no partial rules behind.

    Example:
        >>> members = PermissionSet("members")
        >>> with members.role() as role:
        ...     role.can("create", "member_stuff")
        >>> users = PermissionSet("users").define_role_permissions("member", members)
    """

    def __init__(self, name: str, definer: Optional[Callable[["PermissionSet"], None]] = None):
        self.name = name
        self.logger = get_logger("access_rules.permissions")
        self._index = RuleIndex()
        self._definer = definer
        self._frozen = False
        self._defining = False
        self._lock = threading.RLock()

    def __repr__(self) -> str:
        return f"PermissionSet({self.name!r}, rules={len(self._index)}, frozen={self._frozen})"

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def rule_index(self) -> RuleIndex:
        """The finished index; freezes the set on first access."""
        if not self._frozen:
            self.freeze()
        return self._index

    def freeze(self) -> "PermissionSet":
        """Finish definition, running a deferred definer if there is one."""
        with self._lock:
            if self._frozen or self._defining:
                return self
            if self._definer is not None:
                baseline = RuleIndex().merge(self._index)
                self._defining = True
                try:
                    self._definer(self)
                except Exception:
                    # Partial rules are dropped; the next read runs the definer again
                    self._index = baseline
                    raise
                finally:
                    self._defining = False
                self._definer = None
            self._frozen = True
            self.logger.info("Permission set frozen", name=self.name, **self._index.stats())
        return self

    def inherit(self, source: "PermissionSet") -> "PermissionSet":
        """Flatten every role of ``source`` into the placeholder role."""
        return self._copy_from(self._placeholder_role(), source)

    def define_role_permissions(
        self,
        role: Optional[Hashable] = None,
        template: Optional["PermissionSet"] = None,
        block: Optional[Callable[[RoleBuilder], None]] = None
    ) -> "PermissionSet":
        """Define the rules of ``role`` from a template set and/or a builder block."""
        if role is None:
            role = self._placeholder_role()

        if template is not None:
            self._copy_from(role, template)

        if block is not None:
            builder = RoleBuilder(role)
            block(builder)
            self._merge(builder.rule_index)

        return self

    @contextmanager
    def role(self, role: Optional[Hashable] = None) -> Iterator[RoleBuilder]:
        """Yield a builder for ``role``; its rules are merged when the block exits cleanly."""
        builder = RoleBuilder(role if role is not None else self._placeholder_role())
        yield builder
        self._merge(builder.rule_index)

    def _copy_from(self, role: Hashable, source: "PermissionSet") -> "PermissionSet":
        if not isinstance(source, PermissionSet):
            raise RuleDefinitionError(
                "Permissions can only be copied from another permission set",
                {"permission_set": self.name, "source": repr(source)}
            )
        copied = RuleIndex().copy_into(role, source.rule_index)
        self._merge(copied)
        self.logger.debug("Permissions copied", name=self.name, source=source.name, role=repr(role))
        return self

    def _merge(self, other: RuleIndex) -> None:
        with self._lock:
            if self._frozen:
                raise PermissionsFrozenError(self.name)
            self._index.merge(other)

    @staticmethod
    def _placeholder_role() -> str:
        return get_settings().inherited_role
