"""
Client-selectable field projection for submission responses.

`fields` is a comma separated list of attribute names, or `*` for every
exposable attribute. Resolution happens once per request; the resulting tuple
is handed to the renderer explicitly.
"""
import logging
from typing import Tuple

from submissions.errors import InvalidFieldError

logger = logging.getLogger(__name__)


WILDCARD_FIELD = "*"

SUBMISSION_FIELDS: Tuple[str, ...] = (
    "token",
    "source_code",
    "language_id",
    "compiler_options",
    "command_line_arguments",
    "stdin",
    "expected_output",
    "stdout",
    "stderr",
    "compile_output",
    "message",
    "exit_code",
    "exit_signal",
    "status",
    "status_id",
    "language",
    "created_at",
    "finished_at",
    "time",
    "wall_time",
    "memory",
    "number_of_runs",
    "cpu_time_limit",
    "cpu_extra_time",
    "wall_time_limit",
    "memory_limit",
    "stack_limit",
    "max_processes_and_or_threads",
    "enable_per_process_and_thread_time_limit",
    "enable_per_process_and_thread_memory_limit",
    "max_file_size",
    "redirect_stderr_to_stdout",
    "callback_url",
)

DEFAULT_FIELDS: Tuple[str, ...] = (
    "token",
    "time",
    "memory",
    "stdout",
    "stderr",
    "compile_output",
    "message",
    "status",
)

TOKEN_ONLY: Tuple[str, ...] = ("token",)

_KNOWN_FIELDS = frozenset(SUBMISSION_FIELDS)


def resolve_fields(requested: str | None) -> Tuple[str, ...]:
    """
    Resolve the `fields` query parameter into the attributes a response includes.

    Raises InvalidFieldError for the first name that is neither the wildcard
    nor an exposable attribute; later names are not inspected.
    """
    names = [name for name in (requested or "").split(",") if name]

    for name in names:
        if name != WILDCARD_FIELD and name not in _KNOWN_FIELDS:
            logger.warning(f"Rejecting unknown field {name!r} in fields={requested!r}")
            raise InvalidFieldError(name)

    if WILDCARD_FIELD in names:
        return SUBMISSION_FIELDS

    return tuple(names) or DEFAULT_FIELDS
