"""
Learning Engine — one-shot learning of new top-level rules.

A learn rule recalls a previously captured variable (the subject) and pairs
it with the current turn's capture (the response):

  - a new terminal state whose sole message is the response is added
    under the next StateSource id
  - a literal rule keyed by the subject, targeting that state, is appended
    to the top-level state

Learned artifacts live as long as the StateSource; nothing is written to disk.
"""

import logging
from datetime import datetime
from typing import Dict, List, Mapping, Optional

from rulebot.models.learning import LearnedFact
from rulebot.models.rules import TransitionRule
from rulebot.models.state import State
from rulebot.state_source.store import TOP_LEVEL_STATE_ID, StateSource

logger = logging.getLogger(__name__)

LEARNED_RULE_POINTS = 1


class LearningEngine:
    """Synthesizes states and rules into a StateSource."""

    def __init__(self, source: StateSource, attach_to: str = TOP_LEVEL_STATE_ID):
        self.source = source
        self.attach_to = attach_to
        self._facts: List[LearnedFact] = []

    def learn(
        self,
        subject_variable: str,
        response: str,
        variables: Mapping[str, str],
    ) -> Optional[LearnedFact]:
        """
        Teach the bot that `variables[subject_variable]` answers with `response`.

        Returns None without touching the source when the subject was never
        captured, so out-of-order input cannot crash the turn.
        """
        subject = variables.get(subject_variable)
        if subject is None:
            logger.debug(
                "Nothing to learn: variable %r has not been captured",
                subject_variable,
            )
            return None

        state = State(id=self.source.next_id, messages=[response], keywords=[])
        state_id = self.source.add_state(state)

        rule = TransitionRule(
            keyword=subject,
            target=state_id,
            points=LEARNED_RULE_POINTS,
        )
        self.source.append_rule(self.attach_to, rule)

        fact = LearnedFact(
            subject=subject,
            response=response,
            state_id=state_id,
            attached_to=self.attach_to,
            learned_at=datetime.utcnow(),
        )
        self._facts.append(fact)
        logger.info("Learned %r -> state %s", subject, state_id)
        return fact

    def get_all_facts(self) -> List[LearnedFact]:
        return list(self._facts)

    def facts_by_subject(self) -> Dict[str, List[LearnedFact]]:
        grouped: Dict[str, List[LearnedFact]] = {}
        for fact in self._facts:
            grouped.setdefault(fact.subject, []).append(fact)
        return grouped
