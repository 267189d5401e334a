from ._types import (
    ChatRole,
    ClientConfirmationState,
    ConfirmationType,
    ErrorType,
    ReferenceType,
    RepoItemKind,
    FINISH_REASON_FUNCTION_CALL,
    FINISH_REASON_STOP,
    FINISH_REASON_TOOL_CALLS,
)
from .chat import (
    SESSION_MESSAGE_NAME,
    ChatChoice,
    ChatChoiceDelta,
    ChatChoiceDeltaFunctionCall,
    ChatCompletionChunk,
    ChatMessage,
    ChatRequest,
    ToolCall,
    ToolFunctionCall,
)
from .confirmation import ClientConfirmation, Confirmation
from .errors import StreamError
from .references import (
    ClientFileData,
    ClientSelectionData,
    GitHubAgentData,
    GitHubCurrentUrlData,
    GitHubFileData,
    GitHubRedactedData,
    GitHubRepositoryData,
    GitHubSnippetData,
    OtherReferenceData,
    Reference,
    ReferenceData,
    ReferenceMetadata,
    decode_reference,
)
from .repo_items import Issue, PullRequest, RepoItemRef, resolve_repo_item_ref

__all__ = [
    "ChatRole",
    "ClientConfirmationState",
    "ConfirmationType",
    "ErrorType",
    "ReferenceType",
    "RepoItemKind",
    "FINISH_REASON_FUNCTION_CALL",
    "FINISH_REASON_STOP",
    "FINISH_REASON_TOOL_CALLS",
    "SESSION_MESSAGE_NAME",
    "ChatChoice",
    "ChatChoiceDelta",
    "ChatChoiceDeltaFunctionCall",
    "ChatCompletionChunk",
    "ChatMessage",
    "ChatRequest",
    "ToolCall",
    "ToolFunctionCall",
    "ClientConfirmation",
    "Confirmation",
    "StreamError",
    "ClientFileData",
    "ClientSelectionData",
    "GitHubAgentData",
    "GitHubCurrentUrlData",
    "GitHubFileData",
    "GitHubRedactedData",
    "GitHubRepositoryData",
    "GitHubSnippetData",
    "OtherReferenceData",
    "Reference",
    "ReferenceData",
    "ReferenceMetadata",
    "decode_reference",
    "Issue",
    "PullRequest",
    "RepoItemRef",
    "resolve_repo_item_ref",
]
