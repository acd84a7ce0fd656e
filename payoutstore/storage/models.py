from enum import Enum
from typing import NamedTuple

# Contributors
ContributorUsername = str


class ProviderName(str, Enum):
    GITHUB = "github"
    GITLAB = "gitlab"


class ContributorId(NamedTuple):
    username: ContributorUsername
    provider: str


# Payout Methods
PayoutMethodId = int
PayoutMethodIdentifier = str  # external account id, e.g. a stripe connected account "acct_..."


class PayoutMethodType(str, Enum):
    STRIPE = "stripe"
    PAYPAL = "paypal"


# only these types can be registered for now
SUPPORTED_PAYOUT_METHOD_TYPES = frozenset([PayoutMethodType.STRIPE])
