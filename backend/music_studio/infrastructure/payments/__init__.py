"""
Payment Infrastructure Module

Razorpay gateway integration.
"""

from music_studio.infrastructure.payments.razorpay_service import (
    RazorpayService,
    compute_signature,
    get_razorpay_service,
)

__all__ = [
    "RazorpayService",
    "compute_signature",
    "get_razorpay_service",
]
