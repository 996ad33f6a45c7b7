"""Service-layer exceptions.

Services raise these (or plain ValueError for validation problems);
the error handlers registered in create_app map them to HTTP codes:

  ValueError       -> 400
  DuplicateRecord  -> 409
  RecordNotFound   -> 404
"""


class RecordNotFound(LookupError):
    """A row referenced by id (or ticket number) does not exist."""

    def __init__(self, kind, record_id):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} {record_id} not found.")


class DuplicateRecord(ValueError):
    """A uniqueness rule was violated. Carries the clashing record's id."""

    def __init__(self, message, code, existing_id=None):
        self.code = code
        self.existing_id = existing_id
        super().__init__(message)
