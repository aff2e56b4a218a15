"""Learning Model — facts taught to the bot at runtime."""

from datetime import datetime

from pydantic import BaseModel


class LearnedFact(BaseModel):
    """A state/rule pair synthesized from one learning turn. Lives in memory only."""

    subject: str                            # Recalled value, becomes the new rule's keyword
    response: str                           # Captured text, becomes the new state's message
    state_id: str
    attached_to: str                        # State whose keyword list received the rule
    learned_at: datetime
