from __future__ import annotations


class RecordNotFoundError(LookupError):
    """Raised when a keyed update or delete matches zero rows."""

    def __init__(self, entity: str, **key: object) -> None:
        self.entity = entity
        self.key = key
        rendered_key = ", ".join(f"{name}={value!r}" for name, value in key.items())
        super().__init__(f"{entity} record to update not found ({rendered_key})")
