from .copilot_client import (
    COPILOT_API_URL,
    CompletionsRequest,
    CompletionsTool,
    CopilotClient,
    CopilotModel,
    ToolFunctionDefinition,
)

__all__ = [
    "COPILOT_API_URL",
    "CompletionsRequest",
    "CompletionsTool",
    "CopilotClient",
    "CopilotModel",
    "ToolFunctionDefinition",
]
