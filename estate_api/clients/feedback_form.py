"""
Client for the public feedback form.
Validates the form locally before anything is sent to the API.
"""

from typing import Dict, Optional
import logging
import re

import httpx

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")


class FeedbackResult:
    """Outcome of a form submission, as shown to the person filling it in."""

    def __init__(
        self,
        submitted: bool,
        message: Optional[str] = None,
        errors: Optional[Dict[str, str]] = None
    ):
        self.submitted = submitted
        self.message = message
        self.errors = errors or {}

    def __repr__(self) -> str:
        return f"<FeedbackResult(submitted={self.submitted}, message={self.message!r}, errors={self.errors})>"


class FeedbackFormClient:
    """
    Submits the home page contact form to ``POST {api_prefix}/feedback``.

    Args:
        base_url: API origin, e.g. ``http://localhost:5000``
        client: Optional preconfigured ``httpx.AsyncClient``; one is created
            per submission otherwise
        api_prefix: Path prefix the API is mounted under
    """

    def __init__(
        self,
        base_url: str = "",
        client: Optional[httpx.AsyncClient] = None,
        api_prefix: str = "/api",
        timeout: float = 10.0
    ):
        self.base_url = base_url.rstrip("/")
        self.client = client
        self.api_prefix = api_prefix
        self.timeout = timeout

    @staticmethod
    def validate_form(name: str, email: str, message: str) -> Dict[str, str]:
        """
        Check the form fields.

        Returns:
            Mapping of field name to error message; empty when the form is valid
        """
        errors = {}

        if not (name or "").strip():
            errors["name"] = "Name is required"

        if not (email or "").strip():
            errors["email"] = "Email is required"
        elif not EMAIL_PATTERN.search(email):
            errors["email"] = "Email is invalid"

        if not (message or "").strip():
            errors["message"] = "Message is required"

        return errors

    async def submit(self, name: str, email: str, message: str) -> FeedbackResult:
        """
        Validate and, if valid, send the form.

        Invalid input is returned as field errors without any request being
        made. Otherwise the server's message is surfaced whether the
        submission succeeded or not.
        """
        errors = self.validate_form(name, email, message)
        if errors:
            return FeedbackResult(submitted=False, errors=errors)

        payload = {"name": name, "email": email, "message": message}
        url = f"{self.base_url}{self.api_prefix}/feedback"

        try:
            if self.client is not None:
                response = await self.client.post(url, json=payload)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(url, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"Feedback submission failed: {e}")
            return FeedbackResult(submitted=False, message="Failed to submit feedback")

        return FeedbackResult(
            submitted=response.is_success,
            message=self._server_message(response)
        )

    @staticmethod
    def _server_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or "Failed to submit feedback"

        if isinstance(body, dict):
            if "message" in body:
                return body["message"]
            error = body.get("error")
            if isinstance(error, dict) and error.get("message"):
                return error["message"]

        return "Failed to submit feedback"
