from abc import ABC

from payoutstore.commons.database.infra import DB


class StorageDBRepository(ABC):
    """
    Base repository containing storage DB connection resources
    """

    _database: DB

    def __init__(self, *, _database: DB):
        self._database = _database
