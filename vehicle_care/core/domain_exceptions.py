class DomainException(Exception):
    """Business rule violation raised by the service layer."""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message
