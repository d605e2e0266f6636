# app/api/v1/schemas/auth.py
"""Pydantic schemas for phone OTP and admin login."""

from __future__ import annotations

from pydantic import BaseModel, Field


class OtpSendRequest(BaseModel):
    phone: str = Field(min_length=10, max_length=10)


class OtpVerifyRequest(BaseModel):
    phone: str = Field(min_length=10, max_length=10)
    otp: str = Field(min_length=4, max_length=8)


class AdminLoginRequest(BaseModel):
    admin_key: str = Field(min_length=1)
