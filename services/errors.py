"""Failure conditions raised by the stores and the renderer.

Routes translate them into HTTP responses: NotFound -> 404,
InvalidArgument -> 400, StoreUnavailable -> 500.
"""


class StoreError(Exception):
    """Base class for store and rendering failures"""


class NotFound(StoreError):
    def __init__(self, entity: str, record_id: str):
        super().__init__(f"{entity} {record_id} not found")
        self.entity = entity
        self.record_id = record_id


class InvalidArgument(StoreError):
    pass


class StoreUnavailable(StoreError):
    pass
