"""MCP tool schema definitions for MAMA memory operations.

Each Tool() defines the name, description, and JSON Schema for one tool.
Validators and handlers live in mama_gateway.mcp.handlers.
"""

from mcp.types import Tool

from mama_gateway.types import UPDATABLE_OUTCOMES

MAX_SEARCH_LIMIT = 20
DEFAULT_SEARCH_LIMIT = 5
DEFAULT_CONFIDENCE = 0.8

TOOLS = [
    Tool(
        name="mama_search",
        description="""Search semantic memory for relevant past decisions.

Call this BEFORE:
- Making architectural choices (check prior art)
- Calling mama_save (find links first!)
- Debugging (find past failures on similar issues)
- Starting work on a topic (load context)

Returns decisions ranked by semantic similarity with topic, decision,
reasoning, similarity score (0-100%) and decision ID (for linking/updating).

High similarity (>80%) = link with builds_on/debates/synthesizes.

Example queries: "authentication", "database choice", "error handling".""",
        inputSchema={
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "Search query - topic, question, or keywords",
                },
                "limit": {
                    "type": "integer",
                    "description": f"Max results (default: {DEFAULT_SEARCH_LIMIT}, max: {MAX_SEARCH_LIMIT})",
                    "default": DEFAULT_SEARCH_LIMIT,
                    "minimum": 1,
                    "maximum": MAX_SEARCH_LIMIT,
                },
            },
            "required": ["query"],
        },
    ),
    Tool(
        name="mama_save",
        description="""Save a decision or checkpoint to semantic memory.

Workflow (don't create orphans!):
1. Call mama_search FIRST to find related decisions
2. Check if same topic exists (yours will supersede it)
3. Include a link in the reasoning/summary field

DECISION - use when making architectural choices, learning a lesson,
establishing a convention, or choosing between alternatives.

CHECKPOINT - use when ending a session, reaching a milestone, or before
switching tasks.

Link decisions: end reasoning with 'builds_on: <id>' or 'debates: <id>'
or 'synthesizes: [id1, id2]'""",
        inputSchema={
            "type": "object",
            "properties": {
                "type": {
                    "type": "string",
                    "enum": ["decision", "checkpoint"],
                    "description": "'decision' or 'checkpoint'",
                },
                "topic": {
                    "type": "string",
                    "description": "[Decision] Topic ID e.g. 'auth_strategy'",
                },
                "decision": {
                    "type": "string",
                    "description": "[Decision] The decision e.g. 'Use JWT with refresh tokens'",
                },
                "reasoning": {
                    "type": "string",
                    "description": "[Decision] Why. End with 'builds_on: <id>' to link.",
                },
                "confidence": {
                    "type": "number",
                    "description": f"[Decision] 0.0-1.0 (default: {DEFAULT_CONFIDENCE})",
                    "minimum": 0.0,
                    "maximum": 1.0,
                },
                "summary": {
                    "type": "string",
                    "description": "[Checkpoint] What was accomplished",
                },
                "next_steps": {
                    "type": "string",
                    "description": "[Checkpoint] What to do next",
                },
            },
            "required": ["type"],
        },
    ),
    Tool(
        name="mama_load_checkpoint",
        description="""Load latest checkpoint to resume previous session.

Use at session start to restore previous context, see where you left off,
and get planned next steps. Also returns recent decisions for context.""",
        inputSchema={
            "type": "object",
            "properties": {},
        },
    ),
    Tool(
        name="mama_update",
        description="""Update outcome of a previous decision.

Use when you learn if a decision worked:
- success: worked well
- failed: didn't work (include reason)
- partial: partially worked

Helps future sessions learn from experience.""",
        inputSchema={
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "Decision ID to update"},
                "outcome": {"type": "string", "enum": UPDATABLE_OUTCOMES},
                "reason": {
                    "type": "string",
                    "description": "Why it succeeded/failed/partial",
                },
            },
            "required": ["id", "outcome"],
        },
    ),
]

TOOL_NAMES = [tool.name for tool in TOOLS]
