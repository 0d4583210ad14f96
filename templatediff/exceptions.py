"""Custom exceptions for the templatediff engine."""


class TemplateDiffError(Exception):
    """Base exception for templatediff errors."""
    pass


class InvalidArgumentError(TemplateDiffError, ValueError):
    """Raised when an argument passed to the engine is unusable."""
    def __init__(self, message: str, argument: str = None):
        super().__init__(message)
        self.message = message
        self.argument = argument


class ParseError(TemplateDiffError):
    """Raised when a document is not valid JSON."""
    def __init__(self, message: str, source: str = None, line: int = None, column: int = None):
        if source:
            text = f"Invalid {source} JSON: {message}"
        else:
            text = f"Invalid JSON: {message}"
        if line is not None:
            text += f" (line {line}, column {column})"
        super().__init__(text)
        self.message = message
        self.source = source
        self.line = line
        self.column = column


class DuplicateFunctionError(TemplateDiffError):
    """Raised when a function name is registered twice."""
    def __init__(self, name: str):
        super().__init__(f"Function '{name}' is already registered")
        self.name = name


class FunctionNotFoundError(TemplateDiffError, LookupError):
    """Raised when a function-call placeholder names an unknown function."""
    def __init__(self, name: str):
        super().__init__(f"Function '{name}' is not registered")
        self.name = name


class FunctionExecutionError(TemplateDiffError):
    """Raised when a registered function fails."""
    def __init__(self, name: str, reason: str):
        super().__init__(f"Error executing function '{name}': {reason}")
        self.name = name
        self.reason = reason


class JsonMismatchError(AssertionError):
    """Raised by the assertion helpers when documents do not match."""
    def __init__(self, result, because: str = None):
        lines = [
            f"Expected JSON to {_describe(result.mode)}"
            + (f" because {because}" if because else "")
            + f", but found {len(result.differences)} mismatch(es):"
        ]
        lines.extend(f"  - {difference}" for difference in result.differences)
        super().__init__("\n".join(lines))
        self.result = result


def _describe(mode) -> str:
    if mode.value == "subset":
        return "contain the expected subset"
    return "match the expected document exactly"
