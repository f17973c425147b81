from fastapi import HTTPException


# Stable messages returned verbatim in `detail`; clients display them as-is.
REWARD_NOT_FOUND = "Reward not found"
REDEMPTION_NOT_FOUND = "Redemption not found"
REWARD_UNAVAILABLE = "reward unavailable"
INSUFFICIENT_BALANCE = "insufficient balance"
ALREADY_USED = "already used"
REDEMPTION_EXPIRED = "expired"
REDEMPTION_CODE_COLLISION = "redemption code collision, please retry"
REWARD_NAME_TAKEN = "Reward name already exists"


class ValidationFailed(HTTPException):
    def __init__(self, detail):
        super().__init__(status_code=400, detail=detail)


class Unauthorized(HTTPException):
    def __init__(self, detail="Unauthorized"):
        super().__init__(status_code=401, detail=detail)


class Forbidden(HTTPException):
    def __init__(self, detail="Forbidden"):
        super().__init__(status_code=403, detail=detail)


class NotFound(HTTPException):
    def __init__(self, detail):
        super().__init__(status_code=404, detail=detail)


class Conflict(HTTPException):
    def __init__(self, detail):
        super().__init__(status_code=409, detail=detail)
