"""Interactive console host: reads user lines and prints the bot's replies."""

import argparse
import logging
import sys
from typing import List, Optional, TextIO

from pydantic import ValidationError

from rulebot.config import load_config
from rulebot.engine.factory import build_source, create_engine, resolve_definition
from rulebot.handlers.registry import UnknownHandler
from rulebot.models.config import LOG_LEVELS
from rulebot.state_source.loader import dump_json
from rulebot.state_source.store import InvalidDefinition, NoInvalidAnswers, UnknownState

logger = logging.getLogger(__name__)

QUIT_WORDS = ("quit", "exit")


def run(engine, stdin: TextIO, stdout: TextIO) -> int:
    """Drive `engine` from `stdin` until EOF or a quit word."""
    print(engine.get_message(), file=stdout)

    for line in stdin:
        text = line.strip()
        if text.lower() in QUIT_WORDS:
            break
        if not text:
            continue

        try:
            reply = engine.send(text)
        except (UnknownState, UnknownHandler) as e:
            logger.error("Turn failed: %s", e)
            print(f"[error] {e}", file=stdout)
            continue

        if reply:
            print(reply, file=stdout)
        prompt = engine.get_message()
        if prompt and prompt != reply:
            print(prompt, file=stdout)

    return 0


def main(
    argv: Optional[List[str]] = None,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
) -> int:
    parser = argparse.ArgumentParser(
        description="Chat with a rule-driven conversational agent",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Built-in demo graph
  rulebot

  # Your own graph
  rulebot --definition states.xml

  # Convert a graph to the JSON document format
  rulebot --definition states.xml --dump-definition > states.json
        """
    )

    parser.add_argument(
        "--definition",
        help="State graph file, .json or .xml (default: built-in demo)"
    )

    parser.add_argument(
        "--initial-level",
        help="Id of the entry state (default: 0)"
    )

    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Logging level (default: RULEBOT_LOG_LEVEL, else WARNING)"
    )

    parser.add_argument(
        "--dump-definition",
        action="store_true",
        help="Print the state graph as JSON and exit"
    )

    args = parser.parse_args(argv)
    stdout = stdout or sys.stdout

    try:
        config = load_config(
            definition_path=args.definition,
            initial_level=args.initial_level,
            log_level=args.log_level,
        )
    except ValidationError as e:
        print(f"[X] Invalid configuration: {e}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.dump_definition:
            definition = resolve_definition(config)
            build_source(config, definition)  # rejects graphs the engine would refuse
            print(dump_json(definition), file=stdout)
            return 0
        engine = create_engine(config)
    except (OSError, InvalidDefinition, NoInvalidAnswers) as e:
        print(f"[X] Could not load the state graph: {e}", file=sys.stderr)
        return 1

    return run(engine, stdin or sys.stdin, stdout)


if __name__ == "__main__":
    sys.exit(main())
