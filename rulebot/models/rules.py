"""Rules — the outgoing edges of a conversation state."""

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

WILDCARD = "*"


class RuleKind(str, Enum):
    TRANSITION = "transition"   # Move to `target`
    DISPATCH = "dispatch"       # Call a named handler, then reset
    LEARN = "learn"             # Synthesize a state keyed by a recalled variable


class _RuleBase(BaseModel):
    """Pattern fields shared by every rule kind."""

    model_config = ConfigDict(frozen=True)

    keyword: str                            # "*", literal tokens, or a regex when `variable` is set
    variable: str = ""                      # Session key for the captured value
    points: int = Field(ge=0, default=0)    # Score baseline, higher wins

    @property
    def is_wildcard(self) -> bool:
        return self.keyword == WILDCARD

    @property
    def captures(self) -> bool:
        return bool(self.variable)


class TransitionRule(_RuleBase):
    kind: Literal["transition"] = "transition"
    target: str


class DispatchRule(_RuleBase):
    kind: Literal["dispatch"] = "dispatch"
    handler: str                            # Registry name, e.g. "Weather"
    arg: str = ""                           # Static argument passed with the capture


class LearnRule(_RuleBase):
    kind: Literal["learn"] = "learn"
    target: str
    learn: str                              # Name of a previously captured variable


Rule = Annotated[
    Union[TransitionRule, DispatchRule, LearnRule],
    Field(discriminator="kind"),
]


def rule_from_fields(
    keyword: str,
    target: str = "",
    class_name: str = "",
    arg: str = "",
    variable: str = "",
    points: int = 0,
    learn: str = "",
):
    """
    Build a rule from the flat field set used by definition documents.

    Precedence: a handler name wins over a learn directive, which wins
    over a plain transition.
    """
    if class_name:
        return DispatchRule(
            keyword=keyword,
            variable=variable,
            points=points,
            handler=class_name,
            arg=arg,
        )
    if learn:
        return LearnRule(
            keyword=keyword,
            variable=variable,
            points=points,
            target=target,
            learn=learn,
        )
    return TransitionRule(
        keyword=keyword,
        variable=variable,
        points=points,
        target=target,
    )
