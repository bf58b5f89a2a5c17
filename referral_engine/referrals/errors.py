class ReferralError(Exception):
    pass


class ReferralNotAuthenticatedError(ReferralError):
    pass


class AdvocateNotFoundError(ReferralError):
    pass


class HandleExhaustedError(ReferralError):
    pass


class ReferralRateLimitedError(ReferralError):
    pass


class RewardNotFoundError(ReferralError):
    pass


class RewardOwnershipError(ReferralError):
    pass


class RewardAlreadyRedeemedError(ReferralError):
    pass


class RewardRevokedError(ReferralError):
    pass


class RewardExpiredError(ReferralError):
    pass
