"""
Response envelopes for MCP tool calls.

Every tool call answers with a ``CallToolResult`` holding exactly one text
block and an ``isError`` flag:

    {"content": [{"type": "text", "text": "..."}], "isError": false}

Key Principle:
    - ``isError=False`` means the operation executed correctly, even if the
      result is empty ("No tasks found matching the criteria").
    - ``isError=True`` means the operation did not happen; the text says why.
"""

from mcp.types import CallToolResult, TextContent


def text_result(text: str) -> CallToolResult:
    """Create a success envelope carrying ``text``."""
    return CallToolResult(content=[TextContent(type="text", text=text)], isError=False)


def error_result(message: str) -> CallToolResult:
    """Create an error envelope carrying ``message``."""
    return CallToolResult(
        content=[TextContent(type="text", text=message)], isError=True
    )


def result_text(result: CallToolResult) -> str:
    """Return the text of a single-block envelope."""
    return "".join(
        block.text for block in result.content if isinstance(block, TextContent)
    )
