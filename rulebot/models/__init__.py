"""rulebot data models."""

from rulebot.models.config import BotConfig
from rulebot.models.learning import LearnedFact
from rulebot.models.rules import (
    WILDCARD,
    DispatchRule,
    LearnRule,
    Rule,
    RuleKind,
    TransitionRule,
    rule_from_fields,
)
from rulebot.models.state import (
    KeywordDocument,
    State,
    StateDefinition,
    StateDocument,
)
from rulebot.models.turn import MatchResult, TurnRecord

__all__ = [
    "BotConfig",
    "DispatchRule",
    "KeywordDocument",
    "LearnRule",
    "LearnedFact",
    "MatchResult",
    "Rule",
    "RuleKind",
    "State",
    "StateDefinition",
    "StateDocument",
    "TransitionRule",
    "TurnRecord",
    "WILDCARD",
    "rule_from_fields",
]
