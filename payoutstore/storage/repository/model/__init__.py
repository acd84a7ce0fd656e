import sqlalchemy

from payoutstore.storage.repository.model.contributor import ContributorTable
from payoutstore.storage.repository.model.payout_method import PayoutMethodTable


storage_metadata = sqlalchemy.MetaData()
contributors = ContributorTable(db_metadata=storage_metadata)
payout_methods = PayoutMethodTable(db_metadata=storage_metadata)
