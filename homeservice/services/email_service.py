# Transactional email for the password reset flow
import os
from typing import Dict

import resend

from ..config import TESTING


class EmailService:
    """
    Centralized email service using Resend
    """

    def __init__(self):
        """Initialize Resend with API key"""
        self.api_key = os.getenv("RESEND_API_KEY")
        self.from_email = os.getenv("RESEND_FROM_EMAIL", "onboarding@resend.dev")
        self.frontend_url = os.getenv("FRONTEND_URL", "http://localhost:3000")

        if TESTING or not self.api_key:
            self.disabled = True
            if not TESTING:
                print("⚠️ RESEND_API_KEY not set - emails will not be sent")
            return

        self.disabled = False
        resend.api_key = self.api_key

    def _send(self, to_email: str, subject: str, html: str) -> Dict:
        if self.disabled:
            return {"success": True, "message": f"Email to {to_email} skipped (disabled)"}

        params = {
            "from": self.from_email,
            "to": [to_email],
            "subject": subject,
            "html": html,
        }
        email = resend.Emails.send(params)
        return {
            "success": True,
            "message": f"Email sent to {to_email}",
            "email_id": email.get("id"),
        }

    def send_otp_email(self, to_email: str, name: str, otp: str, ttl_minutes: int = 10) -> Dict:
        """
        Send the one-time passcode for a password reset.

        Returns:
            Dict with 'success' boolean and 'message' or 'error'
        """
        try:
            html_content = f"""
        <!DOCTYPE html>
        <html>
        <body style="margin: 0; padding: 0; font-family: 'Segoe UI', Arial, sans-serif; background-color: #f4f6f8;">
            <table width="100%" cellpadding="0" cellspacing="0" style="padding: 30px 20px;">
                <tr>
                    <td align="center">
                        <table width="560" cellpadding="0" cellspacing="0" style="background-color: #ffffff; border-radius: 12px; padding: 40px;">
                            <tr>
                                <td>
                                    <h2 style="color: #1f2937; margin: 0 0 16px 0;">Password reset</h2>
                                    <p style="color: #4b5563; font-size: 16px;">Hi <strong>{name}</strong>,</p>
                                    <p style="color: #4b5563; font-size: 16px;">
                                        Use this code to reset your password. It expires in {ttl_minutes} minutes.
                                    </p>
                                    <p style="font-size: 32px; font-weight: 700; letter-spacing: 8px; color: #111827; text-align: center; margin: 30px 0;">
                                        {otp}
                                    </p>
                                    <p style="color: #9ca3af; font-size: 13px;">
                                        If you did not ask for this, you can ignore this email.
                                    </p>
                                </td>
                            </tr>
                        </table>
                    </td>
                </tr>
            </table>
        </body>
        </html>
        """
            return self._send(to_email, "Your password reset code", html_content)

        except Exception as e:
            print(f"Error sending OTP email: {str(e)}")
            return {"success": False, "error": str(e)}

    def send_password_reset_confirmation(self, to_email: str, name: str) -> Dict:
        try:
            html_content = f"""
        <!DOCTYPE html>
        <html>
        <body style="margin: 0; padding: 0; font-family: 'Segoe UI', Arial, sans-serif; background-color: #f4f6f8;">
            <table width="100%" cellpadding="0" cellspacing="0" style="padding: 30px 20px;">
                <tr>
                    <td align="center">
                        <table width="560" cellpadding="0" cellspacing="0" style="background-color: #ffffff; border-radius: 12px; padding: 40px;">
                            <tr>
                                <td>
                                    <h2 style="color: #1f2937; margin: 0 0 16px 0;">Password changed</h2>
                                    <p style="color: #4b5563; font-size: 16px;">Hi <strong>{name}</strong>,</p>
                                    <p style="color: #4b5563; font-size: 16px;">
                                        Your password was reset successfully. You can now
                                        <a href="{self.frontend_url}/login" style="color: #2563eb;">sign in</a>
                                        with your new password.
                                    </p>
                                    <p style="color: #9ca3af; font-size: 13px;">
                                        If this was not you, contact support right away.
                                    </p>
                                </td>
                            </tr>
                        </table>
                    </td>
                </tr>
            </table>
        </body>
        </html>
        """
            return self._send(to_email, "Your password has been reset", html_content)

        except Exception as e:
            print(f"Error sending password reset confirmation: {str(e)}")
            return {"success": False, "error": str(e)}


# Create a singleton instance
email_service = EmailService()
