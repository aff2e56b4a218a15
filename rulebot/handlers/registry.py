"""
Handler Registry — named response handlers invoked by dispatch rules.

A handler is any callable `(arg, captured) -> str`. Its output replaces
the normal transition reply, and the engine returns to the top-level state
after the call. Handler calls are synchronous and opaque to the engine.
"""

from typing import Callable, Dict, List, Optional

from rulebot.models.config import BotConfig

Handler = Callable[[str, str], str]


class UnknownHandler(LookupError):
    """Raised when a dispatch rule names a handler that is not registered."""

    def __init__(self, name: str):
        super().__init__(f"No handler registered under name: {name}")
        self.name = name


class HandlerRegistry:
    """Maps handler names (e.g. "Weather") to callables."""

    def __init__(self):
        self._handlers: Dict[str, Handler] = {}

    def register(self, name: str, handler: Handler) -> None:
        """Register or replace the handler for `name`."""
        self._handlers[name] = handler

    def get(self, name: str) -> Handler:
        handler = self._handlers.get(name)
        if handler is None:
            raise UnknownHandler(name)
        return handler

    def __contains__(self, name: str) -> bool:
        return name in self._handlers

    def names(self) -> List[str]:
        return sorted(self._handlers)

    def dispatch(self, name: str, arg: str, captured: str) -> str:
        """Invoke the handler registered under `name`."""
        return self.get(name)(arg, captured)


def default_registry(config: Optional[BotConfig] = None) -> HandlerRegistry:
    """A registry with the built-in handlers wired to `config`."""
    from rulebot.handlers.weather import WeatherHandler

    config = config or BotConfig()
    registry = HandlerRegistry()
    registry.register(
        "Weather",
        WeatherHandler(
            base_url=config.weather_base_url,
            timeout=config.weather_timeout_seconds,
        ),
    )
    return registry
