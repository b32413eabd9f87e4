"""
Application errors for clean API error handling.

Use ServiceUnavailableError when a dependency (the LLM provider) is misconfigured
so the API can return 503 with a user-facing message. AgentError and its
subclasses describe knowledge-agent failures; the orchestrator turns them into
tool results the model can read instead of failing the request.
"""


class ServiceUnavailableError(Exception):
    """Raised when a required service (e.g. the chat provider) is unavailable or misconfigured."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class AgentError(Exception):
    """Raised when a knowledge agent's upstream call fails (timeout, non-2xx, bad payload)."""

    def __init__(self, message: str, agent: str = "") -> None:
        self.message = message
        self.agent = agent
        super().__init__(message)


class ArticleNotFoundError(AgentError):
    """Upstream signalled absence with a 404 (e.g. no Wikipedia article for the term)."""


class QueryValidationError(AgentError):
    """A SPARQL query was rejected by the validator before reaching the network."""


class UnsupportedToolError(Exception):
    """The model asked for an operation the registry does not know."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unsupported operation: {name}")


class ConversationNotFoundError(KeyError):
    """No conversation is stored under the given id."""

    def __init__(self, conversation_id: str) -> None:
        self.conversation_id = conversation_id
        super().__init__(conversation_id)

    def __str__(self) -> str:
        return f"Conversation {self.conversation_id} not found"
