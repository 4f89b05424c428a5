from fastapi import HTTPException
from starlette.requests import Request

from tfa.shared_kernel.primitives import UserId

DEFAULT_USER_ID_HEADER = "X-User-Id"


class RequireUserIdHeaderDependency:
    """
    RequireUserIdHeaderDependency — FastAPI dependency reading the logged-in user id.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-v1.md
    Related:
      - src/tfa/contexts/two_factor/adapters/inbound/api/routes/two_factor_totp.py
      - apps/api/wiring/modules/two_factor.py

    The header is set by the upstream login controller after password
    authentication; it must never be accepted from untrusted clients directly.
    """

    def __init__(self, *, header_name: str = DEFAULT_USER_ID_HEADER) -> None:
        """
        Initialize dependency with trusted header name.

        Args:
            header_name: Request header carrying the user identifier.
        Returns:
            None.
        Raises:
            ValueError: If header name is blank.
        """
        normalized_header_name = header_name.strip()
        if not normalized_header_name:
            raise ValueError("RequireUserIdHeaderDependency requires non-empty header_name")
        self._header_name = normalized_header_name

    def __call__(self, request: Request) -> UserId:
        """
        Resolve user identifier from incoming request headers.

        Args:
            request: FastAPI HTTP request.
        Returns:
            UserId: Identifier of the user the request acts for.
        Assumptions:
            Header lookup is case-insensitive.
        Raises:
            HTTPException: 401 with deterministic payload when header is missing or invalid.
        Side Effects:
            None.
        """
        raw_user_id = request.headers.get(self._header_name, "")
        try:
            return UserId.from_string(raw_user_id)
        except ValueError as error:
            raise HTTPException(
                status_code=401,
                detail={
                    "error": "unauthorized",
                    "message": "Authenticated user is required",
                },
            ) from error
