class ErrorCode:
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_AUTHORIZED = "NOT_AUTHORIZED"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    DUPLICATE_USER = "DUPLICATE_USER"
    VEHICLE_NOT_FOUND = "VEHICLE_NOT_FOUND"
    DUPLICATE_VEHICLE = "DUPLICATE_VEHICLE"
    SERVICE_NOT_FOUND = "SERVICE_NOT_FOUND"
    INVALID_STATUS = "INVALID_STATUS"
    NOTIFICATION_NOT_FOUND = "NOTIFICATION_NOT_FOUND"


NOT_FOUND_CODES = frozenset(
    {
        ErrorCode.USER_NOT_FOUND,
        ErrorCode.VEHICLE_NOT_FOUND,
        ErrorCode.SERVICE_NOT_FOUND,
        ErrorCode.NOTIFICATION_NOT_FOUND,
    }
)
