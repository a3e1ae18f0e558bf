import logging
from typing import Any, Dict, List, Optional

import pydantic
from pydantic import BaseModel, Field, HttpUrl

from submissions.errors import PayloadValidationError
from submissions.utils.encoding_utils import decode_payload
from user_customizable_configs.gateway.loader import get_gateway_config

logger = logging.getLogger(__name__)


PERMITTED_PARAMS = (
    "source_code",
    "language_id",
    "compiler_options",
    "command_line_arguments",
    "number_of_runs",
    "stdin",
    "expected_output",
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


class SubmissionPayload(BaseModel):
    source_code: bytes = Field(min_length=1)
    language_id: int
    compiler_options: Optional[str] = Field(default=None, max_length=512)
    command_line_arguments: Optional[str] = Field(default=None, max_length=512)
    stdin: Optional[bytes] = None
    expected_output: Optional[bytes] = None
    callback_url: Optional[HttpUrl] = None

    # Resource limits; None means "use the configured default"
    number_of_runs: Optional[int] = Field(default=None, ge=1)
    cpu_time_limit: Optional[float] = Field(default=None, ge=0)
    cpu_extra_time: Optional[float] = Field(default=None, ge=0)
    wall_time_limit: Optional[float] = Field(default=None, ge=0)
    memory_limit: Optional[int] = Field(default=None, ge=0)
    stack_limit: Optional[int] = Field(default=None, ge=0)
    max_processes_and_or_threads: Optional[int] = Field(default=None, ge=0)
    max_file_size: Optional[int] = Field(default=None, ge=0)
    enable_per_process_and_thread_time_limit: Optional[bool] = None
    enable_per_process_and_thread_memory_limit: Optional[bool] = None
    redirect_stderr_to_stdout: Optional[bool] = None


def _add_error(errors: Dict[str, List[str]], field: str, message: str) -> None:
    messages = errors.setdefault(field, [])
    if message not in messages:
        messages.append(message)


def build_submission_attributes(params: Dict[str, Any], base64_encoded: bool) -> Dict[str, Any]:
    """
    Validate a create request body and return the attributes to persist.

    Unknown keys are dropped. Omitted limits take the configured defaults;
    requested limits above the configured maxima are rejected.
    Raises PayloadValidationError with a field -> messages mapping.
    """
    permitted = {k: params[k] for k in PERMITTED_PARAMS if k in params}
    decoded, errors = decode_payload(permitted, base64_encoded)

    undecodable = set(errors)
    payload = None
    try:
        payload = SubmissionPayload(**{k: v for k, v in decoded.items() if k not in undecodable})
    except pydantic.ValidationError as e:
        for err in e.errors():
            field = str(err["loc"][0]) if err["loc"] else "base"
            if field not in undecodable:
                _add_error(errors, field, err["msg"])

    if payload is None:
        logger.warning(f"Rejected submission payload: {errors}")
        raise PayloadValidationError(errors)

    config = get_gateway_config()
    if payload.language_id not in config.languages:
        _add_error(errors, "language_id", f"language with id {payload.language_id} doesn't exist")

    attributes = payload.model_dump()
    defaults = config.submission_defaults.model_dump()
    for name, default in defaults.items():
        if attributes.get(name) is None:
            attributes[name] = default

    for name, maximum in config.submission_limits.model_dump().items():
        if attributes[name] > maximum:
            _add_error(errors, name, f"must be less than or equal to {maximum}")

    if errors:
        logger.warning(f"Rejected submission payload: {errors}")
        raise PayloadValidationError(errors)

    if attributes["callback_url"] is not None:
        attributes["callback_url"] = str(attributes["callback_url"])

    return attributes
