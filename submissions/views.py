import json
import logging
from typing import Any, Dict

from django.http import HttpRequest, HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt

from submissions.errors import GatewayError
from submissions.models import Submission
from submissions.utils.admission_utils import admit
from submissions.utils.db_utils import create_submission, delete_submission, load_submission
from submissions.utils.dispatch_utils import dispatch, ensure_wait_enabled
from submissions.utils.encoding_utils import SUBMISSIONS_ENCODING_NOTICE, render_submission, render_submissions
from submissions.utils.field_utils import TOKEN_ONLY, resolve_fields
from submissions.utils.lifecycle_utils import ensure_delete_enabled
from submissions.utils.pagination_utils import paginate, validate_pagination
from submissions.utils.payload_utils import build_submission_attributes

logger = logging.getLogger(__name__)


def _flag(request: HttpRequest, name: str) -> bool:
    return request.GET.get(name) == "true"


def _error_response(e: GatewayError) -> JsonResponse:
    logger.warning(f"{type(e).__name__}: {e}")
    return JsonResponse(e.as_body(), status=e.status_code)


def _not_found(token: str) -> JsonResponse:
    logger.info(f"Submission requested for unknown token={token}")
    return JsonResponse({"error": "submission not found", "token": token}, status=404)


@csrf_exempt
def submissions(request: HttpRequest) -> HttpResponse:
    """
    GET  /submissions/?page=&per_page=&base64_encoded=&fields=
    POST /submissions/?wait=&base64_encoded=&fields=
    """
    if request.method == "GET":
        return list_submissions(request)
    if request.method == "POST":
        return create(request)
    return JsonResponse({"error": "Method not allowed"}, status=405)


@csrf_exempt
def submission_detail(request: HttpRequest, token: str) -> HttpResponse:
    """
    GET    /submissions/<token>/?base64_encoded=&fields=
    DELETE /submissions/<token>/?fields=
    """
    if request.method == "GET":
        return show(request, token)
    if request.method == "DELETE":
        return destroy(request, token)
    return JsonResponse({"error": "Method not allowed"}, status=405)


def list_submissions(request: HttpRequest) -> HttpResponse:
    try:
        fields = resolve_fields(request.GET.get("fields"))
        page, per_page = validate_pagination(request.GET.get("page"), request.GET.get("per_page"))
    except GatewayError as e:
        return _error_response(e)

    items, meta = paginate(Submission.objects.all(), page, per_page)
    result = render_submissions(items, fields, _flag(request, "base64_encoded"))
    if not result.ok:
        return _error_response(result.to_error(SUBMISSIONS_ENCODING_NOTICE))

    logger.info(f"Returning {len(items)} submissions (page={page}, per_page={per_page})")
    return JsonResponse({"submissions": result.data["submissions"], "meta": meta}, status=200)


def show(request: HttpRequest, token: str) -> HttpResponse:
    try:
        fields = resolve_fields(request.GET.get("fields"))
    except GatewayError as e:
        return _error_response(e)

    try:
        submission = load_submission(token)
    except Submission.DoesNotExist:
        return _not_found(token)

    result = render_submission(submission, fields, _flag(request, "base64_encoded"))
    if not result.ok:
        return _error_response(result.to_error())
    return JsonResponse(result.data, status=200)


def create(request: HttpRequest) -> HttpResponse:
    """
    Accept a new submission.
    1. Refuse wait mode when it is disabled.
    2. Resolve the requested fields (wait mode only; the asynchronous
       acknowledgment is always the token alone).
    3. Check the queue has room.
    4. Validate and persist the payload.
    5. Dispatch it to the execution engine.
    """
    wait = _flag(request, "wait")
    base64_encoded = _flag(request, "base64_encoded")

    try:
        ensure_wait_enabled(wait)
        fields = resolve_fields(request.GET.get("fields")) if wait else TOKEN_ONLY
    except GatewayError as e:
        return _error_response(e)

    try:
        payload: Dict[str, Any] = json.loads(request.body.decode("utf-8") or "{}")
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.warning("Failed to parse JSON body")
        return JsonResponse({"error": "Invalid JSON body"}, status=400)
    if not isinstance(payload, dict):
        logger.warning("JSON body is not an object")
        return JsonResponse({"error": "Invalid JSON body"}, status=400)

    try:
        admit()
        attributes = build_submission_attributes(payload, base64_encoded)
    except GatewayError as e:
        return _error_response(e)

    submission = create_submission(attributes)
    result = dispatch(submission, wait=wait, base64_encoded=base64_encoded, fields=fields)
    return JsonResponse(result.body, status=result.status_code)


def destroy(request: HttpRequest, token: str) -> HttpResponse:
    try:
        ensure_delete_enabled()
        fields = resolve_fields(request.GET.get("fields"))
        submission = delete_submission(token)
    except GatewayError as e:
        return _error_response(e)
    except Submission.DoesNotExist:
        return _not_found(token)

    # Always base64 so the deleted data comes back losslessly.
    return JsonResponse(render_submission(submission, fields, base64_encoded=True).data, status=200)
