"""Framework integrations.

Importing this package registers the built-in hooks.
"""

from .job_execution import (
    ACTION_MAILER_CLASSES,
    ExecutionHost,
    JobExecutionHook,
    JobExecutionInterceptor,
    JobRecord,
    action_name,
    instrument_job,
    tags_for_job,
)
from .registry import Hook, clear_hooks, get_hook, list_hooks, load_hooks, register_hook

__all__ = [
    "Hook",
    "register_hook",
    "get_hook",
    "list_hooks",
    "load_hooks",
    "clear_hooks",
    "JobRecord",
    "tags_for_job",
    "action_name",
    "ACTION_MAILER_CLASSES",
    "JobExecutionInterceptor",
    "instrument_job",
    "ExecutionHost",
    "JobExecutionHook",
]
