"""Conversation states and the definition document they are loaded from."""

from typing import List

from pydantic import BaseModel, ConfigDict, Field

from rulebot.models.rules import Rule, rule_from_fields


class State(BaseModel):
    """A node of the conversation graph: prompt text plus outgoing rules."""

    id: str
    messages: List[str] = Field(min_length=1)  # The engine renders the first
    keywords: List[Rule] = []

    @property
    def is_terminal(self) -> bool:
        return not self.keywords

    @property
    def prompt(self) -> str:
        return self.messages[0]


class KeywordDocument(BaseModel):
    """A rule as it appears in a definition file (flat, flag-encoded)."""

    model_config = ConfigDict(populate_by_name=True)

    keyword: str
    target: str = ""
    class_name: str = Field(default="", alias="className")
    arg: str = ""
    variable: str = ""
    points: int = Field(ge=0, default=0)
    learn: str = ""

    def to_rule(self):
        return rule_from_fields(
            keyword=self.keyword,
            target=self.target,
            class_name=self.class_name,
            arg=self.arg,
            variable=self.variable,
            points=self.points,
            learn=self.learn,
        )


class StateDocument(BaseModel):
    id: str
    messages: List[str] = Field(min_length=1)
    keywords: List[KeywordDocument] = []

    def to_state(self) -> State:
        return State(
            id=self.id,
            messages=list(self.messages),
            keywords=[k.to_rule() for k in self.keywords],
        )


class StateDefinition(BaseModel):
    """The decoded construction input of a StateSource."""

    states: List[StateDocument]
    invalid_answers: List[str] = []
