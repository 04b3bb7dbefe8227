"""
Role-based authorization evaluator.

Given a user, an action and a subject, decides whether the action is
permitted from the rules defined for the roles the user holds.

- app.rules: Rule model, per-role rule index and role resolution.
- app.dsl: RoleBuilder, the can/cannot rule-authoring surface.
- app.permissions: PermissionSet, composable role definitions.
- app.authorizer: Authorizer, the per-user decision facade.

Guidelines:
- Define permission sets at import time; they freeze on first query.
- Evaluation is synchronous and never mutates the rule index.
"""
