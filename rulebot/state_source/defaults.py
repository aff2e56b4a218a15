"""The built-in demo conversation graph."""

from rulebot.models.state import StateDefinition


def default_definition() -> StateDefinition:
    """A small graph exercising capture, dispatch and learning."""
    return StateDefinition.model_validate({
        "invalid_answers": [
            "Sorry, I didn't understand that.",
            "Could you say that another way?",
            "Hmm, I'm not sure what you mean.",
        ],
        "states": [
            {
                "id": "0",
                "messages": ["Hi, I'm MajBot. What's your name?"],
                "keywords": [
                    {"keyword": r"(\w+)", "target": "1", "variable": "name", "points": 1},
                ],
            },
            {
                "id": "1",
                "messages": [
                    "What can I do for you, [name]? Ask about the weather, "
                    "tell me about someone, or say bye."
                ],
                "keywords": [
                    {
                        "keyword": r"weather in (\w+)",
                        "className": "Weather",
                        "arg": "today",
                        "variable": "city",
                        "points": 2,
                    },
                    {"keyword": r"about (\w+)", "target": "2", "variable": "subject", "points": 1},
                    {"keyword": "how are you", "target": "4", "points": 1},
                    {"keyword": "joke", "target": "5", "points": 1},
                    {"keyword": "bye", "target": "6", "points": 1},
                ],
            },
            {
                "id": "2",
                "messages": ["What should I know about [subject]?"],
                "keywords": [
                    {
                        "keyword": r"(.+)",
                        "target": "3",
                        "variable": "fact",
                        "learn": "subject",
                        "points": 1,
                    },
                ],
            },
            {"id": "3", "messages": ["Thanks, I'll remember that."]},
            {"id": "4", "messages": ["I'm doing fine, [name]. Thanks for asking!"]},
            {"id": "5", "messages": ["Why do programmers prefer dark mode? Because light attracts bugs."]},
            {"id": "6", "messages": ["Goodbye, [name]!"]},
        ],
    })
