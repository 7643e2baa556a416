"""
Diagnostic records for LangCmd failures.

A Diagnostic is the host-facing summary of one error: its kind, message and
source position. Hosts render it and pick a process exit code from its kind:

    0 success, 1 lex/parse error, 2 validation error,
    3 unresolved binding, 4 handler/execution error
"""

from attrs import frozen

from langcmd.exceptions import ErrorKind, ErrorLevel, LangCmdError

EXIT_SUCCESS = 0


@frozen
class Diagnostic:
    """
    One reported failure.

    Params:
        kind: Error category
        message: Error message without location details
        line: 1-based line in the script, if known
        column: 1-based column in the script, if known
        source_line: Offending script line, if known
    """

    kind: ErrorKind
    message: str
    line: int | None = None
    column: int | None = None
    source_line: str | None = None

    @classmethod
    def from_error(cls, error: LangCmdError) -> "Diagnostic":
        return cls(
            kind=error.kind,
            message=error.message,
            line=error.context.line,
            column=error.context.column,
            source_line=error.context.source_line,
        )

    @property
    def exit_code(self) -> int:
        return self.kind.exit_code

    def format(self, error_level: ErrorLevel = ErrorLevel.USER, filename: str = "<script>") -> str:
        """
        Render as ``file:line:column: kind error: message``.

        Params:
            error_level: DEVELOPER adds the source line and a caret
            filename: Name shown as the location prefix

        Returns:
            Formatted diagnostic text
        """
        location = filename
        if self.line is not None:
            location += f":{self.line}"
            if self.column is not None:
                location += f":{self.column}"
        text = f"{location}: {self.kind.value} error: {self.message}"

        if error_level == ErrorLevel.DEVELOPER and self.source_line is not None:
            text += f"\n    {self.source_line}"
            if self.column is not None:
                text += "\n    " + " " * (self.column - 1) + "^"
        return text


def exit_code_for(diagnostic: Diagnostic | None) -> int:
    """Exit code for a run whose first failure is ``diagnostic`` (None means success)."""
    if diagnostic is None:
        return EXIT_SUCCESS
    return diagnostic.exit_code
