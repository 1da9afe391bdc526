"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_DENIED_NOTICE = "This command is for admins only!"

# Context tags attached to every logged invocation failure.
CONTEXT_COMMAND = "command_invocation"
CONTEXT_AUTO_REPLY = "auto_reply_invocation"
CONTEXT_SCHEDULED = "scheduled_task_execution"
CONTEXT_PERMISSION = "permission_check"


@dataclass(frozen=True)
class MessagingConfig:
    """Settings consumed by messenger and permission adapters."""

    denied_notice: str = DEFAULT_DENIED_NOTICE
    request_timeout_seconds: float = 15.0
