"""Free-form key/value data attached to payments."""

from typing import Any

from pydantic import BaseModel, Field, model_validator


class Metadata(BaseModel):
    """Opaque string mapping; the gateway returns it flat next to `id`."""

    metadata_id: str | None = None
    entries: dict[str, str] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _split_wire_body(cls, data: Any) -> Any:
        if isinstance(data, dict) and "entries" not in data and "metadata_id" not in data:
            entries = {k: str(v) for k, v in data.items() if k != "id"}
            return {"metadata_id": data.get("id"), "entries": entries}
        return data

    def set(self, key: str, value: str) -> "Metadata":
        self.entries[key] = value
        return self

    def get(self, key: str) -> str | None:
        return self.entries.get(key)

    def payload(self) -> dict[str, str]:
        return dict(self.entries)
