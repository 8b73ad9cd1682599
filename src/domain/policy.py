"""
Role checks for the event API.

Grants come from the `rbac` section of rules.yaml. A permission is an
"area:verb" string such as "checkpoints:approve"; a role passes when it
holds that exact permission, the whole area ("checkpoints:*") or "*".
"""

from src.rules.models import Rules


class PolicyEngine:
    def __init__(self, rules: Rules):
        self._grants = {role: frozenset(perms) for role, perms in rules.rbac.roles.items()}

    def grants_for(self, role: str | None) -> frozenset[str]:
        if not role:
            return frozenset()
        return self._grants.get(role, frozenset())

    def check_permission(self, role: str | None, action: str) -> bool:
        area = action.split(":", 1)[0]
        return not self.grants_for(role).isdisjoint({"*", action, f"{area}:*"})
