"""Published metadata record models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class TraitAttribute(BaseModel):
    """A single ``(trait_type, value)`` pair on a metadata record."""

    model_config = ConfigDict(frozen=True)

    trait_type: str
    value: str


class MetadataRecord(BaseModel):
    """The descriptive document published for one evolution stage.

    ``image`` is a placeholder until the publisher has stored the image
    asset; ``to_document`` swaps in the asset reference.  ``asset_name``
    names the uploaded image file and is not part of the document itself.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    attributes: tuple[TraitAttribute, ...] = ()
    previous_ref: str | None = None
    image: str | None = None
    asset_name: str = "image.jpeg"
    asset_content_type: str = "image/jpeg"

    def to_document(self, image_ref: str | None = None) -> dict[str, Any]:
        """Build the JSON-serializable metadata document.

        ``previous_stage`` is only present when the record links to a
        predecessor, so the genesis document carries no dangling key.
        """
        doc: dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "image": image_ref if image_ref is not None else self.image,
            "attributes": [a.model_dump() for a in self.attributes],
        }
        if self.previous_ref is not None:
            doc["previous_stage"] = self.previous_ref
        return doc
