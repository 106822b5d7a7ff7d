"""Admin router — login for the wheel operator."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from app.middleware.auth import ADMIN_ROLE, create_access_token, require_admin, verify_admin_credentials
from app.schemas.auth import AdminLoginRequest, AdminLoginResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.post("/login", response_model=AdminLoginResponse)
def admin_login(req: AdminLoginRequest):
    if not verify_admin_credentials(req.username, req.password):
        logger.warning("Failed admin login for '%s'", req.username)
        raise HTTPException(status_code=401, detail="Invalid credentials")
    token = create_access_token({"sub": req.username, "role": ADMIN_ROLE})
    return AdminLoginResponse(token=token)


@router.get("/me")
def admin_me(admin: str = Depends(require_admin)):
    return {"username": admin, "role": ADMIN_ROLE}
