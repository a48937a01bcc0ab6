"""
Outbound email.

Responsibilities:
- Manage SendGrid credentials and sender identity.
- Deliver password-reset OTP codes.
"""
