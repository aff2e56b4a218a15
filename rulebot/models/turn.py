"""Turn-level records produced by the matcher and the engine."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from rulebot.models.rules import Rule, RuleKind


class MatchResult(BaseModel):
    """The winning rule of one utterance, with its capture carried out-of-band."""

    rule: Rule
    captured: str = ""
    score: int


class TurnRecord(BaseModel):
    """What happened on a single `send` call."""

    user_text: str
    reply: str
    level_before: str
    level_after: str
    matched: Optional[RuleKind] = None
    captured: str = ""
    learned_state_id: Optional[str] = None
    handled_at: datetime
