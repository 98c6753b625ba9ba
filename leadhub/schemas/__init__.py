from .lead import (  # noqa: F401
    LeadOut,
    LeadPage,
    LeadQuery,
    LeadStats,
    LeadUpdate,
    SuccessResponse,
)
