from __future__ import annotations

from django.http import JsonResponse
from django.utils.deprecation import MiddlewareMixin

from census_core.common.api.exceptions import build_error_envelope
from census_core.common.scope import INVALID_UNIT_MSG, MISSING_UNIT_MSG, UnitScope, read_unit_header
from census_core.common.units import is_known_unit


class UnitScopeMiddleware(MiddlewareMixin):
    """
    Enforces the clinical-unit scope for API requests.

    Behavior:
      - Enforced for both /api/v1/* and /api/* (alias).
      - For most endpoints the X-Unit header is required (400 if missing).
      - For /me/ the header is optional, but if provided it must name a known unit.
      - Auth endpoints (login/refresh/logout) never need a unit.
      - Docs/schema/admin endpoints are public.
      - On success -> attaches request.scope and request.unit
    """

    ENFORCED_PREFIXES = ("/api/v1/", "/api/")

    PUBLIC_PATH_PREFIXES = (
        "/admin/",
        "/api/docs/",
        "/api/schema/",
    )

    AUTH_PATH_SUFFIXES = (
        "/auth/login/",
        "/auth/refresh/",
        "/auth/logout/",
    )

    ALLOW_NO_SCOPE_EXACT_PATHS = (
        "/api/v1/",
        "/api/",
    )

    ALLOW_NO_SCOPE_SUFFIXES = ("/me/",)

    def _is_api_path(self, path: str) -> bool:
        return any(path.startswith(p) for p in self.ENFORCED_PREFIXES)

    def _starts_with_any(self, path: str, prefixes: tuple[str, ...]) -> bool:
        return any(path.startswith(p) for p in prefixes)

    def _endswith_any(self, path: str, suffixes: tuple[str, ...]) -> bool:
        return any(path.endswith(s) for s in suffixes)

    def _json_error(self, request, *, status_code: int, code: str, message: str) -> JsonResponse:
        return JsonResponse(
            build_error_envelope(request=request, code=code, message=message, details=None),
            status=status_code,
        )

    def process_request(self, request):
        request.scope = None
        request.unit = None

        path = getattr(request, "path", "") or ""

        if self._starts_with_any(path, self.PUBLIC_PATH_PREFIXES):
            return None

        if not self._is_api_path(path):
            return None

        if path in self.ALLOW_NO_SCOPE_EXACT_PATHS:
            return None

        if self._endswith_any(path, self.AUTH_PATH_SUFFIXES):
            return None

        # Unauthenticated requests are rejected later by DRF with 401/403.
        user = getattr(request, "user", None)
        if not user or not user.is_authenticated:
            return None

        raw = read_unit_header(request)

        if not raw:
            if self._endswith_any(path, self.ALLOW_NO_SCOPE_SUFFIXES):
                return None
            return self._json_error(request, status_code=400, code="validation_error", message=MISSING_UNIT_MSG)

        if not is_known_unit(raw):
            return self._json_error(request, status_code=400, code="validation_error", message=INVALID_UNIT_MSG)

        request.scope = UnitScope(unit=raw)
        request.unit = raw
        return None
