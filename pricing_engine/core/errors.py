"""
Domain errors raised by the pricing engine services.

Routes never translate these by hand; `pricing_engine.main` registers one
exception handler per class so every endpoint reports them the same way.
"""


class PricingEngineError(Exception):
    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class InvalidRequestError(PricingEngineError):
    status_code = 400


class PermissionDeniedError(PricingEngineError):
    status_code = 403


class NotFoundError(PricingEngineError):
    status_code = 404


class ConflictError(PricingEngineError):
    status_code = 409


class AlreadyRevertedError(ConflictError):
    pass
