"""
Built-in command table.

Plain data in the format accepted by ``GrammarRegistry.from_data``; each
domain is a dict with a ``kind`` of ``free_text``, ``enum``, ``range``,
``list`` or ``weighted``.
"""

from langcmd.core.types import GrammarData

FREE_TEXT = {"kind": "free_text"}

LENGTHS = ["short", "medium", "long"]
TONES = ["formal", "casual", "neutral", "persuasive", "friendly", "technical", "humorous"]
AUDIENCE_LEVELS = ["child", "beginner", "intermediate", "expert"]
OUTPUT_FORMATS = ["summary", "detailed", "bullets", "table", "json", "markdown", "prose"]

COMPARISON_CRITERIA = [
    "price",
    "cost",
    "performance",
    "features",
    "services",
    "support",
    "security",
    "scalability",
    "usability",
    "reliability",
    "quality",
    "ecosystem",
]

DEFAULT_GRAMMAR: GrammarData = {
    "ANALYZE": {
        "slot_label": "analysis",
        "description": "Examine the input and report findings for the requested focus.",
        "modifiers": {
            "focus": {
                "kind": "enum",
                "choices": [
                    "sentiment",
                    "thematic",
                    "structural",
                    "statistical",
                    "technical",
                    "linguistic",
                    "competitive",
                    "risk",
                ],
            },
            "depth": {"kind": "enum", "choices": ["surface", "standard", "deep"]},
            "output": {"kind": "enum", "choices": OUTPUT_FORMATS},
        },
    },
    "COMPARE": {
        "slot_label": "comparison",
        "description": "Compare the given items against each other.",
        "modifiers": {
            "weight": {"kind": "weighted", "keys": COMPARISON_CRITERIA},
            "criteria": {"kind": "list", "item": FREE_TEXT},
            "format": {"kind": "enum", "choices": ["table", "prose", "matrix", "bullets"]},
        },
    },
    "SUMMARIZE": {
        "slot_label": "summary",
        "description": "Condense the input while keeping its key points.",
        "modifiers": {
            "length": {"kind": "enum", "choices": LENGTHS},
            "style": {
                "kind": "enum",
                "choices": ["executive", "technical", "casual", "academic", "bullet"],
            },
            "max_words": {"kind": "range", "min": 10, "max": 5000},
            "focus": FREE_TEXT,
        },
    },
    "EVALUATE": {
        "slot_label": "evaluation",
        "description": "Assess the input against criteria and give a verdict.",
        "modifiers": {
            "criteria": {"kind": "list", "item": FREE_TEXT},
            "scale": {"kind": "range", "min": 1, "max": 100},
            "weight": {"kind": "weighted", "keys": COMPARISON_CRITERIA},
            "output": {"kind": "enum", "choices": OUTPUT_FORMATS},
        },
    },
    "REFINE": {
        "slot_label": "refined text",
        "description": "Improve the input without changing its intent.",
        "modifiers": {
            "aspect": {
                "kind": "list",
                "item": {
                    "kind": "enum",
                    "choices": ["clarity", "tone", "grammar", "concision", "structure", "flow"],
                },
            },
            "tone": {"kind": "enum", "choices": TONES},
            "iterations": {"kind": "range", "min": 1, "max": 10},
        },
    },
    "CHAIN": {
        "requires_input": False,
        "slot_label": "chain results",
        "description": "Run the indented steps in order, feeding results forward.",
        "modifiers": {},
    },
    "GENERATE": {
        "slot_label": "generated content",
        "description": "Produce new content from the input prompt.",
        "modifiers": {
            "type": {
                "kind": "enum",
                "choices": ["article", "story", "poem", "code", "email", "report", "outline", "list", "ideas"],
            },
            "tone": {"kind": "enum", "choices": TONES},
            "length": {"kind": "enum", "choices": LENGTHS},
            "count": {"kind": "range", "min": 1, "max": 50},
            "audience": FREE_TEXT,
        },
    },
    "EXPAND": {
        "slot_label": "expansion",
        "description": "Elaborate on the input with additional detail.",
        "modifiers": {
            "depth": {"kind": "range", "min": 1, "max": 5},
            "focus": {"kind": "list", "item": FREE_TEXT},
            "examples": {"kind": "enum", "choices": ["none", "some", "many"]},
        },
    },
    "TRANSLATE": {
        "slot_label": "translation",
        "description": "Translate the input into another language or register.",
        "modifiers": {
            "to": FREE_TEXT,
            "from": FREE_TEXT,
            "style": {"kind": "enum", "choices": ["literal", "natural", "formal", "casual", "localized"]},
        },
    },
    "SIMPLIFY": {
        "slot_label": "simplified text",
        "description": "Rewrite the input so it is easier to understand.",
        "modifiers": {
            "level": {"kind": "enum", "choices": AUDIENCE_LEVELS},
            "audience": FREE_TEXT,
            "length": {"kind": "enum", "choices": LENGTHS},
        },
    },
    "STRUCTURE": {
        "slot_label": "structured content",
        "description": "Organize the input into a clear structure.",
        "modifiers": {
            "format": {
                "kind": "enum",
                "choices": ["outline", "table", "json", "yaml", "markdown", "hierarchy", "mindmap"],
            },
            "sections": {"kind": "list", "item": FREE_TEXT},
        },
    },
    "FORMAT": {
        "slot_label": "formatted output",
        "description": "Render the input in the requested output format.",
        "modifiers": {
            "as": {
                "kind": "enum",
                "choices": ["markdown", "json", "yaml", "csv", "html", "table", "plain", "xml"],
            },
            "style": FREE_TEXT,
        },
    },
    "OPTIMIZE": {
        "slot_label": "optimization",
        "description": "Improve the input for the stated goals.",
        "modifiers": {
            "for": {
                "kind": "list",
                "item": {
                    "kind": "enum",
                    "choices": [
                        "performance",
                        "readability",
                        "cost",
                        "seo",
                        "clarity",
                        "conversion",
                        "memory",
                        "speed",
                        "maintainability",
                    ],
                },
            },
            "constraints": FREE_TEXT,
            "weight": {
                "kind": "weighted",
                "keys": ["performance", "readability", "cost", "clarity", "speed", "memory"],
            },
        },
    },
    "CONNECT": {
        "slot_label": "connections",
        "description": "Find relationships between the given concepts.",
        "modifiers": {
            "relationship": {
                "kind": "enum",
                "choices": ["causal", "temporal", "thematic", "hierarchical", "analogical", "any"],
            },
            "domains": {"kind": "list", "item": FREE_TEXT},
            "depth": {"kind": "range", "min": 1, "max": 5},
        },
    },
    "VISUALIZE": {
        "slot_label": "visualization",
        "description": "Describe or draw a visual representation of the input.",
        "modifiers": {
            "type": {
                "kind": "enum",
                "choices": ["flowchart", "diagram", "chart", "timeline", "mindmap", "table", "graph"],
            },
            "format": {"kind": "enum", "choices": ["ascii", "mermaid", "description", "svg"]},
        },
    },
    "VALIDATE": {
        "slot_label": "validation",
        "description": "Check the input for correctness against the given rules.",
        "modifiers": {
            "against": FREE_TEXT,
            "criteria": {"kind": "list", "item": FREE_TEXT},
            "strict": {"kind": "enum", "choices": ["true", "false"]},
        },
    },
    "DEBUG": {
        "slot_label": "debug report",
        "description": "Locate and explain defects in the input.",
        "modifiers": {
            "language": FREE_TEXT,
            "level": {
                "kind": "enum",
                "choices": ["syntax", "logic", "performance", "security", "all"],
            },
            "fix": {"kind": "enum", "choices": ["true", "false"]},
        },
    },
    "EXPLAIN": {
        "slot_label": "explanation",
        "description": "Explain the input for the intended audience.",
        "modifiers": {
            "level": {"kind": "enum", "choices": ["eli5", *AUDIENCE_LEVELS]},
            "format": {"kind": "enum", "choices": ["prose", "steps", "analogy", "example", "qa"]},
            "length": {"kind": "enum", "choices": LENGTHS},
        },
    },
    "SEARCH": {
        "slot_label": "search results",
        "description": "Gather information relevant to the query.",
        "modifiers": {
            "scope": {"kind": "enum", "choices": ["web", "academic", "news", "docs", "code", "internal"]},
            "limit": {"kind": "range", "min": 1, "max": 100},
            "timeframe": FREE_TEXT,
            "sources": {"kind": "list", "item": FREE_TEXT},
        },
    },
    "DESIGN": {
        "slot_label": "design",
        "description": "Propose a design that satisfies the input requirements.",
        "modifiers": {
            "type": {
                "kind": "enum",
                "choices": ["system", "ui", "api", "database", "architecture", "workflow", "schema"],
            },
            "constraints": {"kind": "list", "item": FREE_TEXT},
            "style": FREE_TEXT,
            "detail": {"kind": "enum", "choices": ["sketch", "standard", "detailed"]},
        },
    },
}
