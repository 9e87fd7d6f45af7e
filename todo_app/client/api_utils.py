import asyncio
from typing import Awaitable, Callable, Optional

from todo_app.client.result import ApiResult, ErrorKind, Failure

ERROR_MESSAGES = {
    "Network error occurred": "Unable to connect to the server. Please check your internet connection.",
    "Session expired": "Your session has expired. Please log in again.",
    "Invalid credentials": "The email or password you entered is incorrect.",
    "Email already registered": "An account with this email already exists.",
    "Email not verified": "Please verify your email address before logging in.",
    "Invalid OTP": "The verification code you entered is incorrect.",
    "OTP has expired": "The verification code has expired. Please request a new one.",
    "Missing fields": "Please fill in all required fields.",
    "Todo not found": "The requested todo item could not be found.",
    "Unauthorized": "You are not authorized to perform this action.",
}

# failures a retry cannot fix
NON_RETRYABLE = {ErrorKind.VALIDATION, ErrorKind.UNAUTHORIZED, ErrorKind.FORBIDDEN}


def handle_api_error(error: str) -> str:
    """Maps a known API error to user-facing text; anything else passes through."""
    if error in ERROR_MESSAGES:
        return ERROR_MESSAGES[error]
    # client-generated messages carry a trailing sentence, e.g. "Session expired. Please login again."
    for prefix, message in ERROR_MESSAGES.items():
        if error.startswith(prefix + "."):
            return message
    return error


def validate_todo_data(title: str, description: Optional[str] = None) -> Optional[str]:
    """Returns an error message, or None when the todo data is acceptable."""
    if not title or not title.strip():
        return "Title is required"
    if len(title.strip()) > 200:
        return "Title must be less than 200 characters"
    if description and len(description.strip()) > 1000:
        return "Description must be less than 1000 characters"
    return None


async def retry_api_call(
    api_call: Callable[[], Awaitable[ApiResult]],
    max_retries: int = 3,
    delay: float = 1.0,
) -> ApiResult:
    """
    Re-invokes an idempotent call with linear backoff (delay * attempt).

    Validation, unauthorized and forbidden failures are returned immediately.
    """
    if max_retries < 1:
        raise ValueError("max_retries must be at least 1")
    last: Optional[Failure] = None
    for attempt in range(1, max_retries + 1):
        result = await api_call()
        if result.ok:
            return result
        if result.kind in NON_RETRYABLE:
            return result
        last = result
        if attempt < max_retries:
            await asyncio.sleep(delay * attempt)

    return Failure(f"Failed after {max_retries} attempts: {last.error}", last.kind, last.status)
