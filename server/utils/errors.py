class ValidationError(ValueError):
    """Bad input, rejected before anything is written."""

    def __init__(self, message, errors=None):
        super().__init__(message)
        self.message = message
        self.errors = errors or {}

    def to_dict(self):
        data = {"message": self.message}
        if self.errors:
            data["errors"] = self.errors
        return data


class NotFoundError(LookupError):
    """An expected miss, e.g. an unknown card number on the public lookup."""

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class ConflictError(ValueError):
    def __init__(self, message):
        super().__init__(message)
        self.message = message
