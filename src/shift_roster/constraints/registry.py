"""Rule registry - manages the roster rules applied by the engine."""

from __future__ import annotations

from shift_roster.constraints.base import DayRule, MonthRule, RosterRule


class RuleRegistry:
    """Registry of roster rules, kept in registration order."""

    def __init__(self) -> None:
        self._rules: dict[str, RosterRule] = {}

    def register(self, rule: RosterRule) -> None:
        self._rules[rule.rule_id] = rule

    def get(self, rule_id: str) -> RosterRule:
        if rule_id not in self._rules:
            available = ", ".join(sorted(self._rules.keys()))
            raise KeyError(f"Unknown rule: {rule_id}. Available: {available}")
        return self._rules[rule_id]

    def list_all(self) -> list[RosterRule]:
        return list(self._rules.values())

    def day_rules(self) -> list[DayRule]:
        return [r for r in self._rules.values() if isinstance(r, DayRule)]

    def month_rules(self) -> list[MonthRule]:
        return [r for r in self._rules.values() if isinstance(r, MonthRule)]


# Global registry instance
_global_registry: RuleRegistry | None = None


def get_registry() -> RuleRegistry:
    """Get the global rule registry, initializing if needed."""
    global _global_registry
    if _global_registry is None:
        _global_registry = _create_default_registry()
    return _global_registry


def _create_default_registry() -> RuleRegistry:
    """Create and populate the default registry with all built-in rules."""
    from shift_roster.constraints.day_constraints import PerPersonCap, RequiredHeadcount
    from shift_roster.constraints.fairness_constraints import WorkloadBalance

    registry = RuleRegistry()
    for rule_cls in [
        # Day rules, in the order their violations are reported within a day
        RequiredHeadcount,
        PerPersonCap,
        # Fairness rules
        WorkloadBalance,
    ]:
        registry.register(rule_cls())
    return registry
