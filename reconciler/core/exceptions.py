from fastapi import Request
from fastapi.responses import JSONResponse
from datetime import datetime, timezone
import logging
from typing import Optional, Union

logger = logging.getLogger(__name__)

class ReconcilerException(Exception):
    """Base reconciler exception"""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class CIBackendException(ReconcilerException):
    """Drone API transport or HTTP status failure"""
    def __init__(self, backend: str, message: str, status_code: int = 502, details: dict = None):
        details = dict(details or {}, backend=backend)
        super().__init__(f"[{backend}] {message}", status_code, details)

class BuildDecodeError(ReconcilerException):
    """Drone payload does not match the expected build shape"""
    def __init__(self, backend: str, source: Union[str, int], fields: Optional[list] = None, reason: str = ""):
        fields = fields or []
        message = f"[{backend}] could not decode {source}"
        if fields:
            message += f": invalid field(s) {', '.join(fields)}"
        elif reason:
            message += f": {reason}"
        super().__init__(message, 502, {"backend": backend, "source": str(source), "fields": fields})

class ContractViolation(ReconcilerException):
    """A caller relied on data the build model does not guarantee"""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, 500, details)

class InvalidBuildLink(ReconcilerException):
    """Build link carries no path to read a pull request number from"""
    def __init__(self, link: str, build_number: int):
        message = f"Link '{link}' of build {build_number} has no path segment"
        super().__init__(message, 502, {"link": link, "build_number": build_number})

class MissingBuildComponent(ReconcilerException):
    """Named stage or step not present in a build"""
    def __init__(self, kind: str, name: str, build_number: int):
        message = f"No {kind} '{name}' in build '{build_number}'"
        super().__init__(message, 404, {"kind": kind, "name": name, "build_number": build_number})

def _error_body(request: Request, message: str, error_type: str, details: dict) -> dict:
    return {
        "error": {
            "message": message,
            "type": error_type,
            "details": details,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "path": request.url.path
        }
    }

async def reconciler_exception_handler(request: Request, exc: ReconcilerException):
    """Handle reconciler exceptions"""
    logger.error(f"Reconciler Exception: {exc.message}", extra={
        "status_code": exc.status_code,
        "details": exc.details,
        "path": request.url.path,
        "method": request.method
    })
    
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(request, exc.message, exc.__class__.__name__, exc.details)
    )

async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions"""
    logger.error(f"Unhandled exception: {str(exc)}", extra={
        "path": request.url.path,
        "method": request.method,
        "exception_type": exc.__class__.__name__
    }, exc_info=True)
    
    return JSONResponse(
        status_code=500,
        content=_error_body(
            request,
            "Internal server error",
            "InternalServerError",
            {"error_id": f"err_{hash(str(exc)) % 10000:04d}"}
        )
    )
