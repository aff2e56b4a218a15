"""
Conversation Engine — walks the state graph one utterance at a time.

Turn protocol (send):
  1. Load the current state. A terminal state's prompt is one-shot: the
     engine resets to the top-level state *before* matching, so the
     utterance that follows a leaf reply is read against the top menu.
  2. Select at most one rule. No winner -> an invalid-answer reply and
     the level is left where it is.
  3. Apply the winner's side effects immediately: a capture is stored in
     the session variables, a learn rule synthesizes a new state and
     top-level rule. These stay applied even if the rest of the turn fails.
  4. Dispatch rules call their handler and reset to the top level.
     Other rules move to their target; a terminal target is rendered and
     the level resets to the top level.

On a non-terminal transition the reply is the successor's rendered prompt,
or "" when `echo_successor_prompt` is off (the caller then asks for
`get_message()` itself).

Single-threaded and per-session: the engine mutates its StateSource when it
learns, so concurrent sessions need their own source.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional

from rulebot.handlers.registry import HandlerRegistry
from rulebot.learning.engine import LearningEngine
from rulebot.matching.regex import clear
from rulebot.matching.scorer import select
from rulebot.models.config import BotConfig
from rulebot.models.learning import LearnedFact
from rulebot.models.rules import DispatchRule, LearnRule
from rulebot.models.state import State
from rulebot.models.turn import MatchResult, TurnRecord
from rulebot.state_source.store import StateSource

logger = logging.getLogger(__name__)


class ConversationEngine:
    """Per-session conversation state machine."""

    def __init__(
        self,
        initial_level: str,
        source: StateSource,
        registry: HandlerRegistry,
        config: Optional[BotConfig] = None,
    ):
        self.config = config or BotConfig()
        self.source = source
        self.registry = registry
        self.learning = LearningEngine(source, attach_to=self.config.reset_level)
        self._level = initial_level
        self._variables: Dict[str, str] = {}
        self._history: List[TurnRecord] = []

    @property
    def current_level(self) -> str:
        return self._level

    @property
    def variables(self) -> Dict[str, str]:
        """A copy of the session dictionary."""
        return dict(self._variables)

    @property
    def history(self) -> List[TurnRecord]:
        return list(self._history)

    # --- Rendering ---

    def get_message(self) -> str:
        """The current state's prompt with variables substituted."""
        return self._render(self.source.get_state(self._level))

    def substitute(self, text: str) -> str:
        """Replace each `[name]` with its captured value, in key order."""
        for name in sorted(self._variables):
            text = text.replace(f"[{name}]", self._variables[name])
        return text

    def _render(self, state: State) -> str:
        return clear(self.substitute(state.prompt)).strip()

    # --- Turn handling ---

    def send(self, text: str) -> str:
        """Process one utterance and return the reply."""
        level_before = self._level
        state = self.source.get_state(self._level)

        if state.is_terminal:
            self._level = self.config.reset_level
            state = self.source.get_state(self._level)

        result = select(text, state.keywords)
        fact: Optional[LearnedFact] = None

        if result is None:
            logger.debug("No rule matched %r at level %s", text, self._level)
            reply = self.source.invalid_answer()
        else:
            fact = self._apply_effects(result)
            reply = self._follow(result)

        self._history.append(TurnRecord(
            user_text=text,
            reply=reply,
            level_before=level_before,
            level_after=self._level,
            matched=result.rule.kind if result else None,
            captured=result.captured if result else "",
            learned_state_id=fact.state_id if fact else None,
            handled_at=datetime.utcnow(),
        ))
        return reply

    def _apply_effects(self, result: MatchResult) -> Optional[LearnedFact]:
        """Store the capture or learn from it. Runs once per turn, on the winner."""
        rule = result.rule
        if isinstance(rule, LearnRule):
            return self.learning.learn(rule.learn, result.captured, self._variables)
        if result.captured:
            self._variables[rule.variable] = result.captured
        return None

    def _follow(self, result: MatchResult) -> str:
        rule = result.rule
        if isinstance(rule, DispatchRule):
            logger.debug("Dispatching %s(%r, %r)", rule.handler, rule.arg, result.captured)
            reply = self.registry.dispatch(rule.handler, rule.arg, result.captured)
            self._level = self.config.reset_level
            return reply
        return self._transition(rule.target)

    def _transition(self, target: str) -> str:
        # Resolve first so an unknown target leaves the level untouched
        successor = self.source.get_state(target)
        logger.debug("Level %s -> %s", self._level, target)
        self._level = target

        if successor.is_terminal:
            reply = self._render(successor)
            self._level = self.config.reset_level
            return reply

        if self.config.echo_successor_prompt:
            return self._render(successor)
        return ""
