import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from secure_labs.errors import ValidationFailed
from secure_labs.resolver import Rejected, resolve
from secure_labs.types import ErrorResponse, ReadRequest, ReadResult, RejectionReason, SetupResult
from secure_labs.validation import Invalid, validate_filename
from secure_labs.web.dependencies import Dependencies, get_deps

logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid filename or directory requested"},
    403: {"model": ErrorResponse, "description": "Path traversal detected"},
    404: {"model": ErrorResponse, "description": "File not found"},
    500: {"model": ErrorResponse, "description": "Unexpected failure"},
}

router = APIRouter()

# Mounted only when the insecure demo is explicitly enabled
insecure_router = APIRouter(tags=["insecure-demo"])


@router.post("/read", response_model=ReadResult, responses=ERROR_RESPONSES)
def read_file(body: ReadRequest, deps: Annotated[Dependencies, Depends(get_deps)]):
    """Read a file from the base directory."""
    validation = validate_filename(body.filename)
    if isinstance(validation, Invalid):
        raise ValidationFailed(validation.message)

    result = resolve(deps.file_ops.base_dir, validation.value)
    if isinstance(result, Rejected):
        if result.reason is RejectionReason.TRAVERSAL_DETECTED:
            logger.warning(f"Rejected path traversal attempt: {validation.value!r}")
        raise result.to_error()

    # Read directly instead of checking existence first
    content = deps.file_ops.read_text(result.path)
    return ReadResult(path=str(result.path), content=content)


@router.post("/setup-sample", response_model=SetupResult, responses={500: ERROR_RESPONSES[500]})
def setup_sample(deps: Annotated[Dependencies, Depends(get_deps)]):
    """Create the sample files inside the base directory."""
    deps.file_ops.write_samples()
    return SetupResult(ok=True, base=str(deps.file_ops.base_dir))


@insecure_router.post("/read-no-validate", response_model=ReadResult)
def read_no_validate(body: ReadRequest, deps: Annotated[Dependencies, Depends(get_deps)]):
    """UNSAFE: read a file with no validation, decoding or jail check."""
    filename = body.filename if isinstance(body.filename, str) else ""
    path, content = deps.file_ops.read_unsafe(filename)
    return ReadResult(path=str(path), content=content)
