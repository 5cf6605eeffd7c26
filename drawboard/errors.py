class DrawboardError(Exception):
    """Base error carrying the HTTP status and the message shown to clients."""

    status_code = 500
    message = "Internal server error"

    def __init__(self, message=None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class InvalidInput(DrawboardError):
    status_code = 400
    message = "Invalid image data"


class NotFound(DrawboardError):
    status_code = 404
    message = "No drawings found"


class PayloadTooLarge(DrawboardError):
    status_code = 413
    message = "Payload too large"


class StorageFailure(DrawboardError):
    message = "Failed to save image"


class EncodingFailure(DrawboardError):
    message = "Failed to create collage"


class ProcessingFailure(DrawboardError):
    message = "Error generating collage"
