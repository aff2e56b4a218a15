"""
State Source — the repository of conversation states.

Loaded once from a StateDefinition; afterwards only the engine mutates it,
and only when learning synthesizes a new state and top-level rule.

Not safe to share between concurrent sessions. Hosts that serve several
sessions give each one its own `clone()`.
"""

import itertools
import logging
import random
from typing import Dict, List, Optional

from rulebot.models.rules import Rule
from rulebot.models.state import State, StateDefinition

logger = logging.getLogger(__name__)

ENTRY_STATE_ID = "0"
TOP_LEVEL_STATE_ID = "1"


class UnknownState(LookupError):
    """Raised when a state id is not present in the source."""

    def __init__(self, state_id: str):
        super().__init__(f"Unknown state: {state_id}")
        self.state_id = state_id


class NoInvalidAnswers(ValueError):
    """Raised when a source is configured with an empty invalid-answer pool."""
    pass


class InvalidDefinition(ValueError):
    """Raised when a definition document cannot produce a usable source."""
    pass


class StateSource:
    """In-memory state repository with a monotonically increasing id counter."""

    def __init__(
        self,
        definition: StateDefinition,
        invalid_answer_policy: str = "round_robin",
        rng: Optional[random.Random] = None,
    ):
        if not definition.invalid_answers:
            raise NoInvalidAnswers("At least one invalid answer is required")
        if invalid_answer_policy not in ("round_robin", "random"):
            raise ValueError(
                f"Unknown invalid answer policy: {invalid_answer_policy}"
            )

        self._states: Dict[str, State] = {}
        for doc in definition.states:
            if doc.id in self._states:
                raise InvalidDefinition(f"Duplicate state id: {doc.id}")
            self._states[doc.id] = doc.to_state()

        for required in (ENTRY_STATE_ID, TOP_LEVEL_STATE_ID):
            if required not in self._states:
                raise InvalidDefinition(f"Missing required state: {required}")

        self._invalid_answers: List[str] = list(definition.invalid_answers)
        self._policy = invalid_answer_policy
        self._rng = rng or random.Random()
        self._cycle = itertools.cycle(self._invalid_answers)
        self._counter = self._initial_counter()

    def _initial_counter(self) -> int:
        """One past the largest integer id loaded."""
        numeric = [int(i) for i in self._states if i.isdigit()]
        return max(numeric, default=-1) + 1

    @property
    def next_id(self) -> str:
        """The id the next `add_state` call will assign."""
        return str(self._counter)

    def get_state(self, state_id: str) -> State:
        state = self._states.get(state_id)
        if state is None:
            raise UnknownState(state_id)
        return state

    def has_state(self, state_id: str) -> bool:
        return state_id in self._states

    def state_ids(self) -> List[str]:
        return list(self._states)

    def invalid_answer(self) -> str:
        """One of the configured "I didn't understand" replies."""
        if self._policy == "random":
            return self._rng.choice(self._invalid_answers)
        return next(self._cycle)

    @property
    def invalid_answers(self) -> List[str]:
        return list(self._invalid_answers)

    def add_state(self, state: State) -> str:
        """Append a state under the next counter id and return that id."""
        state_id = str(self._counter)
        while state_id in self._states:
            # Skip ids taken by non-contiguous numeric states
            self._counter += 1
            state_id = str(self._counter)
        self._counter += 1

        state.id = state_id
        self._states[state_id] = state
        logger.debug("Added state %s", state_id)
        return state_id

    def append_rule(self, state_id: str, rule: Rule) -> None:
        """Append a rule to the keyword list of an existing state."""
        self.get_state(state_id).keywords.append(rule)

    def clone(self) -> "StateSource":
        """An independent copy, for giving each session its own graph."""
        twin = StateSource.__new__(StateSource)
        twin._states = {
            sid: s.model_copy(deep=True) for sid, s in self._states.items()
        }
        twin._invalid_answers = list(self._invalid_answers)
        twin._policy = self._policy
        twin._rng = random.Random()
        twin._cycle = itertools.cycle(twin._invalid_answers)
        twin._counter = self._counter
        return twin

    def snapshot(self) -> dict:
        """A JSON-able dump of the current graph."""
        return {
            "states": [s.model_dump(mode="json") for s in self._states.values()],
            "invalid_answers": list(self._invalid_answers),
            "next_id": self.next_id,
        }
