"""
Codemode Tool Models

Tools are described in the Anthropic tool_use format; providers
translate the schema for other APIs.
"""

from dataclasses import dataclass, field


@dataclass
class ToolDefinition:
    """A tool that can be offered to the model."""
    name: str
    description: str
    input_schema: dict = field(default_factory=dict)

    def to_schema(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.input_schema,
        }


@dataclass
class ToolResult:
    """Result of executing a tool."""
    tool_use_id: str
    content: str
    is_error: bool = False
