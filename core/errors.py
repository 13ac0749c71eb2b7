"""Error types raised while detecting stacks and building instruction documents."""


class AiInstructionsError(Exception):
    """Base class for all errors reported to the user."""


class MalformedMarkerFile(AiInstructionsError):
    """A marker file exists but cannot be read or parsed."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Malformed marker file '{path}': {reason}")


class UnreadableTree(AiInstructionsError):
    """The project root cannot be listed."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read project root '{path}': {reason}")


class UnreadableSubtree(AiInstructionsError):
    """A directory below the project root cannot be listed. Never fatal."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Skipping unreadable directory '{path}': {reason}")


class MissingRuleContent(AiInstructionsError):
    """No stored content exists for a rule identifier."""

    def __init__(self, rule_id: str):
        self.rule_id = rule_id
        super().__init__(f"Missing rule content (expected file: rules/{rule_id}.md)")


class NoSelectionError(AiInstructionsError):
    """Neither detection nor explicit selectors produced any rule identifiers."""

    def __init__(self, message: str = "No rule files selected – nothing to generate."):
        super().__init__(message)


class RuleStoreError(AiInstructionsError):
    """The bundled rule content store is missing or unusable."""

    def __init__(self, path: str, reason: str = "rule directory not found"):
        self.path = path
        self.reason = reason
        super().__init__(f"Rule store '{path}' unavailable: {reason}")


class ConfigError(AiInstructionsError):
    """A project configuration file cannot be read or has the wrong shape."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid config file '{path}': {reason}")
