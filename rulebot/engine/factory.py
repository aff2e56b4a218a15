"""Wiring helpers shared by the CLI and the HTTP host."""

from typing import Optional

from rulebot.engine.conversation import ConversationEngine
from rulebot.handlers.registry import HandlerRegistry, default_registry
from rulebot.models.config import BotConfig
from rulebot.models.state import StateDefinition
from rulebot.state_source.defaults import default_definition
from rulebot.state_source.loader import load_definition
from rulebot.state_source.store import StateSource


def resolve_definition(config: BotConfig) -> StateDefinition:
    """The configured definition file, or the built-in graph."""
    if config.definition_path:
        return load_definition(config.definition_path)
    return default_definition()


def build_source(
    config: BotConfig, definition: Optional[StateDefinition] = None
) -> StateSource:
    return StateSource(
        definition or resolve_definition(config),
        invalid_answer_policy=config.invalid_answer_policy,
    )


def create_engine(
    config: Optional[BotConfig] = None,
    source: Optional[StateSource] = None,
    registry: Optional[HandlerRegistry] = None,
) -> ConversationEngine:
    config = config or BotConfig()
    return ConversationEngine(
        initial_level=config.initial_level,
        source=source or build_source(config),
        registry=registry or default_registry(config),
        config=config,
    )
