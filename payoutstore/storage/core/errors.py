from enum import Enum

from payoutstore.commons.core.errors import PaymentError


class StorageError(PaymentError[str]):
    def __init__(self, error_code: str, error_message: str, retryable: bool):
        super().__init__(
            error_code=error_code, error_message=error_message, retryable=retryable
        )


###########################################################
# PayoutMethod Errors
###########################################################
class PayoutMethodErrorCode(str, Enum):
    OPERATION_NOT_SUPPORTED = "payout_method_operation_not_supported"
    TYPE_NOT_SUPPORTED = "payout_method_type_not_supported"
    PAYOUT_METHOD_NOT_FOUND = "payout_method_not_found"


payout_method_error_message_maps = {
    PayoutMethodErrorCode.OPERATION_NOT_SUPPORTED: "Operation is not supported on payout methods.",
    PayoutMethodErrorCode.TYPE_NOT_SUPPORTED: "Only stripe payout methods can be registered for now.",
    PayoutMethodErrorCode.PAYOUT_METHOD_NOT_FOUND: "Can't find payout method in db.",
}


class PayoutMethodError(StorageError):
    def __init__(self, error_code: str, error_message: str, retryable: bool):
        super().__init__(
            error_code=error_code, error_message=error_message, retryable=retryable
        )


class PayoutMethodOperationNotSupportedError(PayoutMethodError):
    """
    Raised for operations payout methods refuse on purpose,
    e.g. iterating over the payout methods of every contributor.
    """

    def __init__(self, error_message: str = None, error_code: str = None):
        super().__init__(
            error_code=error_code or PayoutMethodErrorCode.OPERATION_NOT_SUPPORTED,
            error_message=error_message
            or payout_method_error_message_maps[
                PayoutMethodErrorCode.OPERATION_NOT_SUPPORTED
            ],
            retryable=False,
        )


class PayoutMethodTypeNotSupportedError(PayoutMethodOperationNotSupportedError):
    def __init__(self):
        super().__init__(
            error_code=PayoutMethodErrorCode.TYPE_NOT_SUPPORTED,
            error_message=payout_method_error_message_maps[
                PayoutMethodErrorCode.TYPE_NOT_SUPPORTED
            ],
        )


class PayoutMethodNotFoundError(PayoutMethodError):
    def __init__(self):
        super().__init__(
            error_code=PayoutMethodErrorCode.PAYOUT_METHOD_NOT_FOUND,
            error_message=payout_method_error_message_maps[
                PayoutMethodErrorCode.PAYOUT_METHOD_NOT_FOUND
            ],
            retryable=False,
        )
