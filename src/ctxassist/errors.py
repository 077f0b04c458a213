from __future__ import annotations


class CtxAssistError(Exception):
    pass


class ProviderError(CtxAssistError):
    """A suggestion provider could not produce a result."""


class SettingsError(CtxAssistError):
    pass


class UnknownProviderError(SettingsError):
    def __init__(self, kind: str) -> None:
        super().__init__(f"Unknown suggestion provider kind: {kind!r}")
        self.kind = kind
