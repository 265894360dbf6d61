from dataclasses import dataclass


@dataclass(frozen=True)
class ProcessResult:
    """Outcome of a single external command invocation."""

    exit_code: int
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.exit_code == 0 and not self.timed_out
