from __future__ import annotations

import typing
from abc import ABC, abstractmethod

from ctxassist.logger import logger
from ctxassist.models import AcceptanceMode


class AcceptancePolicy(ABC):
    """Splices an accepted suggestion into the current text.

    Returns ``None`` when the trigger cannot be located in ``raw_text``.
    """

    @abstractmethod
    def splice(self, raw_text: str, trigger: str, suggestion: str) -> str | None:
        raise NotImplementedError


class AppendAfterTrigger(AcceptancePolicy):
    separator = " "

    def splice(self, raw_text: str, trigger: str, suggestion: str) -> str | None:
        if not raw_text.lower().endswith(trigger.lower()):
            return None
        return raw_text + self.separator + suggestion


class ConcatenateAfterTrigger(AppendAfterTrigger):
    # Completions carry their own leading space or punctuation.
    separator = ""


class ReplaceText(AcceptancePolicy):
    def splice(self, raw_text: str, trigger: str, suggestion: str) -> str | None:
        return suggestion


_POLICIES: dict[AcceptanceMode, typing.Type[AcceptancePolicy]] = {
    AcceptanceMode.APPEND: AppendAfterTrigger,
    AcceptanceMode.CONCATENATE: ConcatenateAfterTrigger,
    AcceptanceMode.REPLACE: ReplaceText,
}


def policy_for(mode: AcceptanceMode | str) -> AcceptancePolicy:
    return _POLICIES[AcceptanceMode(mode)]()


class AcceptanceResolver:
    def __init__(self, policy: AcceptancePolicy | None = None) -> None:
        self._policy = policy if policy is not None else AppendAfterTrigger()

    @property
    def policy(self) -> AcceptancePolicy:
        return self._policy

    def accept(
        self,
        current_raw_text: str,
        matched_trigger: str | None,
        suggestion_text: str,
    ) -> str:
        if matched_trigger is None:
            logger.warning(
                "acceptance_inconsistent",
                reason="no_matched_trigger",
                suggestion=suggestion_text,
            )
            return current_raw_text
        new_text = self._policy.splice(
            current_raw_text, matched_trigger, suggestion_text
        )
        if new_text is None:
            logger.warning(
                "acceptance_inconsistent",
                reason="trigger_not_found",
                trigger=matched_trigger,
                suggestion=suggestion_text,
            )
            return current_raw_text
        return new_text
