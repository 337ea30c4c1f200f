"""Signed parameters for direct browser uploads to the media host."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from libs.auth.access_gate import Requirement
from libs.auth.dependencies import enforce, require_active_account
from libs.auth.models import AccountSnapshot
from libs.common.logging import get_logger
from libs.common.media_utils import (
    ADMIN_ONLY_FOLDERS,
    MediaHostNotConfigured,
    sign_upload,
)

from services.media_service.schemas import SignedUploadParams, UploadFolder

router = APIRouter(prefix="/upload", tags=["upload"])
logger = get_logger(__name__)


@router.get("/signed-params", response_model=SignedUploadParams)
async def get_signed_upload_params(
    folder: UploadFolder = Query("gallery"),
    account: AccountSnapshot = Depends(require_active_account),
):
    """
    Sign an upload into ``folder``.

    Gallery and event images are admin-only; matrimony and profile photos
    are open to any signed-in account.
    """
    if folder in ADMIN_ONLY_FOLDERS:
        enforce({Requirement.AUTH, Requirement.ADMIN}, account)

    try:
        params = sign_upload(folder)
    except MediaHostNotConfigured:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Media uploads are not configured. Please contact an administrator.",
        )

    logger.info(f"Signed upload params for folder {folder} (account {account.id})")
    return SignedUploadParams(**params)
