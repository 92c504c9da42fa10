from __future__ import annotations


class CompileError(SyntaxError):
    """Base of every error that aborts a compilation."""

    def __init__(self, message: str, line: int | None = None):
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class LexicalError(CompileError):
    def __init__(self, fragment: str, line: int | None = None):
        self.fragment = fragment
        super().__init__(f"unrecognized token {{{fragment}}}", line)


class SyntaxArityError(CompileError):
    pass


class UnsupportedOperatorError(CompileError):
    def __init__(self, operator: str, line: int | None = None):
        self.operator = operator
        super().__init__(f"operator {{{operator}}} not supported", line)


class UnbalancedBlockError(CompileError):
    pass


class UnrecognizedStatementError(CompileError):
    pass
