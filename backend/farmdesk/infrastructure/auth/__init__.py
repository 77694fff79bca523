from farmdesk.infrastructure.auth.jwt_auth import (
    decode_access_token,
    get_current_user_id,
    issue_access_token,
)

__all__ = ["decode_access_token", "get_current_user_id", "issue_access_token"]
