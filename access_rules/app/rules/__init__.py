"""
Rules engine package.

Defines the rule model, the per-role rule index and the role-level
resolution algorithm used by the authorizer.

Modules of interest:
- models: Rule, Condition, wildcard/category helpers and Decision.
- repository: RuleIndex with lookup by role, subject and action, plus
  merge and copy-into-role composition.
- engine: Role resolution with the negation veto.

The index is built once when permissions are defined and is read-only
while queries are evaluated.
"""
