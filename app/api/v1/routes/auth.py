# app/api/v1/routes/auth.py
"""Customer phone verification via OTP."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from app.api.v1.envelope import ok
from app.api.v1.schemas.auth import OtpSendRequest, OtpVerifyRequest
from app.domain.services import otp_service

router = APIRouter(prefix="/auth/otp", tags=["Auth"])


@router.post("/send", response_model=dict)
async def send_otp(body: OtpSendRequest):
    success, err = await otp_service.send_otp(body.phone)
    if not success:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=err)
    return ok(message="OTP sent")


@router.post("/verify", response_model=dict)
async def verify_otp(body: OtpVerifyRequest):
    verified, err = otp_service.verify_otp(body.phone, body.otp)
    if not verified:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=err)
    return ok(data={"phone": body.phone, "verified": True}, message="Phone verified")
