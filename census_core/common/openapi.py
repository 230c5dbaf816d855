# census_core/common/openapi.py
from __future__ import annotations

from drf_spectacular.openapi import AutoSchema
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter


class CensusAutoSchema(AutoSchema):
    """
    Global OpenAPI improvements:

    - Adds the X-Unit scope header automatically to scoped endpoints
    - Skips it for auth endpoints and schema/docs endpoints
    """

    UNIT_HEADER = OpenApiParameter(
        name="X-Unit",
        type=OpenApiTypes.STR,
        location=OpenApiParameter.HEADER,
        required=True,
        enum=["HDU", "ICU", "TRANSPLANT", "4th-WARD", "WARD5"],
        description="Clinical unit the request operates on.",
    )

    def _is_unscoped_endpoint(self) -> bool:
        view = getattr(self, "view", None)
        if view is None:
            return False

        if view.__class__.__name__ in {"SpectacularAPIView", "SpectacularSwaggerView"}:
            return True

        if getattr(view, "requires_unit", False):
            return False

        # Auth and /me live in the iam api package
        module = view.__class__.__module__ or ""
        return module.startswith("census_core.iam.api.")

    def get_override_parameters(self):
        params = list(super().get_override_parameters() or [])

        if not self._is_unscoped_endpoint():
            if not any(p.name.lower() == "x-unit" for p in params):
                params.append(self.UNIT_HEADER)

        return params
