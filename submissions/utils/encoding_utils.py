"""
Raw vs. base64 transport of submission text attributes.

Source code, stdin and the engine's outputs are stored as bytes that were never
checked to be UTF-8. Raw rendering decodes them strictly; base64 rendering
always succeeds. Rendering reports failure through RenderResult instead of
raising, so every caller decides how an unrenderable submission is reported.
"""
import base64
import binascii
import logging
from typing import Any, Dict, Iterable, NamedTuple, Optional, Tuple

from submissions.errors import EncodingError
from submissions.models import Submission
from submissions.statuses import serialize_status
from user_customizable_configs.gateway.loader import get_language_name

logger = logging.getLogger(__name__)


BYTE_FIELDS = frozenset({
    "source_code",
    "stdin",
    "expected_output",
    "stdout",
    "stderr",
    "compile_output",
    "message",
})

BASE64_INPUT_FIELDS: Tuple[str, ...] = ("source_code", "stdin", "expected_output")

SUBMISSION_ENCODING_NOTICE = (
    "some attributes for this submission cannot be converted to UTF-8, "
    "use base64_encoded=true query parameter"
)
SUBMISSIONS_ENCODING_NOTICE = (
    "some attributes for one or more submissions cannot be converted to UTF-8, "
    "use base64_encoded=true query parameter"
)


class RenderResult(NamedTuple):
    data: Optional[Dict[str, Any]] = None
    failed_field: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.failed_field is None

    def to_error(self, notice: str = SUBMISSION_ENCODING_NOTICE) -> EncodingError:
        return EncodingError(notice)


def as_bytes(value) -> Optional[bytes]:
    if value is None:
        return None
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


def encode_base64(value: Optional[bytes]) -> Optional[str]:
    if value is None:
        return None
    return base64.b64encode(value).decode("ascii")


def decode_base64(value: Optional[str]) -> Optional[bytes]:
    """
    Strictly decode base64 text; raises binascii.Error on malformed input.
    Line breaks and other whitespace (as written by MIME style encoders) are ignored.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        raise TypeError(f"base64 value must be a string, not {type(value).__name__}")
    return base64.b64decode("".join(value.split()), validate=True)


def decode_payload(params: Dict[str, Any], base64_encoded: bool) -> Tuple[Dict[str, Any], Dict[str, list]]:
    """
    Turn the text attributes of a create request into the bytes that get stored.

    Returns the converted params and a mapping of field -> errors for
    attributes that are not valid base64.
    """
    decoded = dict(params)
    errors: Dict[str, list] = {}
    for name in BASE64_INPUT_FIELDS:
        value = decoded.get(name)
        if value is None:
            continue
        if not isinstance(value, str):
            errors[name] = ["must be a string"]
            continue
        if not base64_encoded:
            decoded[name] = value.encode("utf-8")
            continue
        try:
            decoded[name] = decode_base64(value)
        except (binascii.Error, ValueError):
            errors[name] = ["is not valid base64"]
    return decoded, errors


def _render_attribute(submission: Submission, name: str) -> Any:
    if name == "status":
        return serialize_status(submission.status_id)
    if name == "language":
        return {"id": submission.language_id, "name": get_language_name(submission.language_id)}
    value = getattr(submission, name)
    if name in ("created_at", "finished_at"):
        return value.isoformat() if value else None
    return value


def render_submission(submission: Submission, fields: Iterable[str], base64_encoded: bool) -> RenderResult:
    data: Dict[str, Any] = {}
    for name in fields:
        if name not in BYTE_FIELDS:
            data[name] = _render_attribute(submission, name)
            continue

        raw = as_bytes(getattr(submission, name))
        if base64_encoded:
            data[name] = encode_base64(raw)
            continue
        try:
            data[name] = raw.decode("utf-8") if raw is not None else None
        except UnicodeDecodeError:
            logger.warning(f"Submission {submission.token}: attribute {name} is not valid UTF-8")
            return RenderResult(failed_field=name)
    return RenderResult(data=data)


def render_submissions(submissions: Iterable[Submission], fields: Iterable[str], base64_encoded: bool) -> RenderResult:
    fields = tuple(fields)
    rendered = []
    for submission in submissions:
        result = render_submission(submission, fields, base64_encoded)
        if not result.ok:
            return result
        rendered.append(result.data)
    return RenderResult(data={"submissions": rendered})
