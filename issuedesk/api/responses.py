from issuedesk.schemas.common import ErrorResponse

BAD_REQUEST = {400: {"model": ErrorResponse, "description": "Validation error"}}
UNAUTHORIZED = {401: {"model": ErrorResponse, "description": "Unauthorized"}}
NOT_FOUND = {404: {"model": ErrorResponse, "description": "Not found"}}
CONFLICT = {409: {"model": ErrorResponse, "description": "Conflict"}}
TOO_LARGE = {413: {"model": ErrorResponse, "description": "Payload too large"}}
RATE_LIMITED = {429: {"model": ErrorResponse, "description": "Too many requests"}}
