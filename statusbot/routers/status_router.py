"""Direct status-check triggers: queued (/check-status) and synchronous (/capture).

Routers handle HTTP concerns only - no business logic.
"""

from datetime import UTC, datetime

from fastapi import APIRouter, HTTPException

from statusbot.enums import JobStatus
from statusbot.errors import AccountNotFound, IncompleteCredentials
from statusbot.models.base import JsonModel
from statusbot.services.status_check_service import (
    INCOMPLETE_TEXT,
    NOT_FOUND_TEXT,
    StatusCheckService,
)

COMPLETED_MESSAGE = "Automation completed successfully for all links"


class CheckStatusRequest(JsonModel):
    """Request model for a manual status check."""

    username: str | None = None
    phone_number: str | None = None


class CheckStatusDetails(JsonModel):
    username: str
    phone: str
    position: int
    timestamp: datetime


class CheckStatusResponse(JsonModel):
    """Response model for a queued status check."""

    status: str
    message: str
    details: CheckStatusDetails


class CaptureRequest(JsonModel):
    """Request model for a synchronous capture."""

    username: str | None = None
    phone_number: str | None = None


class CaptureResponse(JsonModel):
    message: str
    processed_count: int
    status: JobStatus


def create_status_router(
    status_service: StatusCheckService,
    default_destination: str | None = None,
) -> APIRouter:
    """Create status router with injected service.

    Args:
        status_service: StatusCheckService instance for business logic
        default_destination: WhatsApp number used by /capture when the
            request names none

    Returns:
        APIRouter with the check-status and capture endpoints configured
    """
    router = APIRouter(tags=["status"])

    @router.post("/check-status", response_model=CheckStatusResponse)
    async def check_status(request: CheckStatusRequest) -> CheckStatusResponse:
        """Queue a status check for a requester.

        Raises:
            HTTPException: 400 if username or phone_number is missing
        """
        if not request.username or not request.phone_number:
            raise HTTPException(
                status_code=400,
                detail="Both username and phone_number are required",
            )
        try:
            ticket = await status_service.handle_request(
                request.username, request.phone_number
            )
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        return CheckStatusResponse(
            status="success",
            message="Status check initiated",
            details=CheckStatusDetails(
                username=request.username,
                phone=request.phone_number,
                position=ticket.position,
                timestamp=datetime.now(UTC),
            ),
        )

    @router.post("/capture", response_model=CaptureResponse)
    async def capture(request: CaptureRequest) -> CaptureResponse:
        """Run a status check and answer once it has finished.

        Raises:
            HTTPException: 400 if username or a destination is missing,
                404 if the account is unknown or its credentials are incomplete
        """
        if not request.username:
            raise HTTPException(
                status_code=400,
                detail="Missing required parameter. Please provide username",
            )
        destination = request.phone_number or default_destination
        if not destination:
            raise HTTPException(
                status_code=400,
                detail="No phone_number given and no default WhatsApp number configured",
            )

        try:
            processed, status = await status_service.capture(request.username, destination)
        except AccountNotFound:
            raise HTTPException(
                status_code=404,
                detail={"error": "Account not found", "message": NOT_FOUND_TEXT},
            )
        except IncompleteCredentials:
            raise HTTPException(
                status_code=404,
                detail={"error": "Incomplete credentials", "message": INCOMPLETE_TEXT},
            )
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        return CaptureResponse(
            message=COMPLETED_MESSAGE,
            processed_count=processed,
            status=status,
        )

    return router
