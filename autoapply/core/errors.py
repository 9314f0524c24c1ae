"""
Error taxonomy for autoapply, defining one catch boundary per failure class.
- AutoApplyError: base class of every custom exception
- FatalRunError: errors that abort the whole run (config, auth, browser, navigation)
- ActionExecutionError: one activation technique failed (absorbed by the actuator)
- programming errors: illegal state transition, duplicate outcome, bad locator chain
"""
# @file purpose: Define error taxonomy for autoapply.

from typing import Any


class AutoApplyError(Exception):
    """Base class for all custom errors in autoapply."""


class FatalRunError(AutoApplyError):
    """Aborts the run. Teardown still happens."""


class ConfigError(FatalRunError):
    """Configuration file is missing, unreadable or incomplete."""


class AuthenticationError(FatalRunError):
    """No post-login signal was observed within the long ceiling."""


class BrowserStartError(FatalRunError):
    """The browser-control session could not be started."""


class NavigationError(FatalRunError):
    """The listing page could not be reached with any load strategy."""


class ActionExecutionError(AutoApplyError):
    """
    Raised when a single activation technique fails on a resolved element.
    Carries enough context for the actuator to log a one-line diagnosis.
    """

    def __init__(
        self,
        action: str,
        message: str,
        *,
        technique: str | None = None,
        selector: str | None = None,
        details: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.action: str = action
        self.technique: str | None = technique
        self.selector: str | None = selector
        self.details: dict[str, Any] = details or {}
        self.cause: BaseException | None = cause

    def __str__(self) -> str:
        parts = [f"[{self.action}] {super().__str__()}"]
        if self.technique:
            parts.append(f"technique={self.technique}")
        if self.selector:
            parts.append(f"selector={self.selector}")
        if self.details:
            kv = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            parts.append(f"details={{ {kv} }}")
        return " | ".join(parts)


class LocatorChainError(AutoApplyError):
    """A candidate chain was registered empty or without a free-text fallback."""


class InvalidTransitionError(AutoApplyError):
    """The navigation state machine was asked for a transition it does not allow."""


class DuplicateOutcomeError(AutoApplyError):
    """A second outcome was recorded for an item that already has one."""
