from .rule_engine import (
    RuleEngine,
    RuleResult,
    Rule,
    RULES,
    ValueShape,
    classify,
    is_overwritable,
    format_table,
)

__all__ = [
    'RuleEngine',
    'RuleResult',
    'Rule',
    'RULES',
    'ValueShape',
    'classify',
    'is_overwritable',
    'format_table',
]
