class SequencerError(Exception):
    """Base exception for all playlist sequencer errors."""

    def __init__(self, message: str, user_message: str | None = None) -> None:
        super().__init__(message)
        self.user_message = user_message or message


class BusinessError(SequencerError):
    """Exception for rule violations (e.g. invalid playlist operation)."""

    pass


class InfrastructureError(SequencerError):
    """Exception for failures outside the sequencer (e.g. audio engine)."""

    pass


class EngineError(InfrastructureError):
    """An audio engine command failed (media load, playback, seek...)."""

    def __init__(
        self,
        message: str,
        user_message: str | None = None,
        *,
        command: str | None = None,
    ) -> None:
        super().__init__(message, user_message)
        self.command = command
