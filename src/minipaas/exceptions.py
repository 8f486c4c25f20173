"""
Exception types raised by minipaas.
"""
import shlex
from typing import List, Optional


class MinipaasError(Exception):
    """
    Base class for every error minipaas raises on purpose.
    """


class ConfigError(MinipaasError):
    """
    A configuration file could not be read or did not validate.
    """


class CommandError(MinipaasError):
    """
    An engine command exited with a non-zero status, or could not be spawned.

    Args:
        command (str): Executable that was invoked.
        args (List[str]): Arguments passed to the executable.
        returncode (Optional[int]): Exit status, None if the process never ran.
        stderr (str): Captured standard error output.
    """
    def __init__(self,
                 command: str,
                 args: List[str],
                 returncode: Optional[int] = None,
                 stderr: str = ""):
        self.command = command
        self.command_args = list(args)
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(str(self))

    @property
    def command_line(self) -> str:
        return " ".join(shlex.quote(a) for a in [self.command] + self.command_args)

    def __str__(self) -> str:
        message = f"command failed: {self.command_line}"
        if self.returncode is not None:
            message += f" (exit status {self.returncode})"
        if self.stderr:
            message += f": {self.stderr.strip()}"
        return message


class AggregateCommandError(MinipaasError):
    """
    One or more commands of a batch operation failed.

    Sub-operations that completed are not rolled back; ``errors`` holds
    every failure in the order the batch was issued.
    """
    operation = "batch"

    def __init__(self, errors: List[BaseException]):
        self.errors = list(errors)
        super().__init__(str(self))

    def __str__(self) -> str:
        details = "; ".join(str(e) for e in self.errors)
        return f"{self.operation} failed for {len(self.errors)} item(s): {details}"


class PullError(AggregateCommandError):
    operation = "pull"


class StopError(AggregateCommandError):
    operation = "stop"


class MetadataError(MinipaasError):
    """
    Service metadata is missing, has an unsupported format or failed to parse.
    """


class UnresolvedPrefixError(MinipaasError, KeyError):
    """
    A metadata query used a namespace prefix that is not in the namespace table.
    """
    def __init__(self, prefix: str):
        self.prefix = prefix
        super().__init__(prefix)

    def __str__(self) -> str:
        return f"unresolved namespace prefix: {self.prefix!r}"
