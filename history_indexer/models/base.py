"""
Base document model.

Store metadata (`_id`, `_rev`) is handled here so concrete records only
declare their own fields.
"""

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict

# Store-assigned metadata fields
ID_FIELD = "_id"
REV_FIELD = "_rev"
STORE_METADATA = (ID_FIELD, REV_FIELD)


def strip_metadata(document: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of a stored document without `_id`/`_rev`."""
    return {k: v for k, v in document.items() if k not in STORE_METADATA}


class StoreDocument(BaseModel):
    """
    Base class for records persisted in the document store.

    Subclasses name the attribute used as document identifier in
    `id_attribute` and get `to_document()` / `from_document()` for free.
    """

    id_attribute: ClassVar[str]

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @property
    def doc_id(self) -> str:
        """Document identifier."""
        return getattr(self, self.id_attribute)

    def to_document(self) -> dict[str, Any]:
        """
        Serialize to the stored document shape.

        Returns:
            Document with `_id` set and `_rev` only when known
        """
        document = self.model_dump(by_alias=True, exclude={"rev"})
        document[ID_FIELD] = self.doc_id
        rev = getattr(self, "rev", None)
        if rev:
            document[REV_FIELD] = rev
        return document

    @classmethod
    def from_document(cls, document: dict[str, Any]):
        """
        Validate a stored document into a record.

        Args:
            document: Raw document from the store

        Returns:
            Record instance (revision kept where the model has one)

        Raises:
            pydantic.ValidationError: If the document shape is invalid
        """
        data = dict(document)
        doc_id = data.pop(ID_FIELD, None)
        rev = data.pop(REV_FIELD, None)
        data.setdefault(cls.id_attribute, doc_id)
        if "rev" in cls.model_fields:
            data["rev"] = rev
        return cls.model_validate(data)
