"""
Vault Items — Sealing item fields for the record store and opening them back.

Only ``password`` and ``notes`` are encrypted. ``title``, ``username`` and
``url`` are stored in the clear.

Security Note:
    Batch loads log failing item ids only, never field values.
"""
import asyncio
import logging
from datetime import datetime
from typing import Any, Optional, Union
from collections.abc import Iterable, Mapping

from pydantic import (
    AliasChoices,
    BaseModel,
    Field,
    ValidationError,
    field_validator,
)

from .crypto import VaultKey, encrypt, decrypt
from .exceptions import DecryptionError

logger = logging.getLogger("passvault.vault")


class VaultItem(BaseModel):
    """Plaintext vault item."""

    id: Optional[str] = None
    title: str = Field(min_length=1)
    username: Optional[str] = None
    password: str = Field(min_length=1, repr=False)
    url: Optional[str] = None
    notes: Optional[str] = Field(default=None, repr=False)

    model_config = {"coerce_numbers_to_str": True}

    @field_validator("username", "url", "notes", mode="before")
    @classmethod
    def blank_as_none(cls, v: Any) -> Any:
        if v == "":
            return None
        return v


class VaultRecord(BaseModel):
    """A row as held by the record store."""

    id: str
    owner_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("owner_id", "user_id"),
    )
    title: str
    username: Optional[str] = None
    encrypted_password: str
    url: Optional[str] = None
    encrypted_notes: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"coerce_numbers_to_str": True}


class VaultLoadResult(BaseModel):
    """Outcome of opening a batch of records."""

    items: list[VaultItem] = Field(default_factory=list)
    failed: list[str] = Field(default_factory=list)


def seal_item(
    item: VaultItem, key: VaultKey, owner_id: Optional[str] = None
) -> dict[str, Any]:
    """Build the row payload for inserting or updating ``item``.

    Args:
        item: Plaintext item.
        key: Vault key of the owning session.
        owner_id: Included as ``owner_id`` when given (inserts).

    Returns:
        Row fields; the store supplies ``id`` and ``created_at``.
    """
    row: dict[str, Any] = {
        "title": item.title,
        "username": item.username,
        "encrypted_password": encrypt(item.password, key),
        "url": item.url,
        "encrypted_notes": encrypt(item.notes, key) if item.notes else None,
    }
    if owner_id is not None:
        row["owner_id"] = owner_id
    return row


def open_record(record: VaultRecord, key: VaultKey) -> VaultItem:
    """Decrypt a stored row back into a :class:`VaultItem`.

    Raises:
        DecryptionError: If either envelope fails to decrypt.
    """
    return VaultItem(
        id=record.id,
        title=record.title,
        username=record.username,
        password=decrypt(record.encrypted_password, key),
        url=record.url,
        notes=(
            decrypt(record.encrypted_notes, key)
            if record.encrypted_notes else None
        ),
    )


def _record_id(record: Union[VaultRecord, Mapping[str, Any]], index: int) -> str:
    """Return the row id for logs and ``failed``, or ``#<index>`` if it has none."""
    if isinstance(record, VaultRecord):
        return record.id
    if isinstance(record, Mapping) and record.get("id") not in (None, ""):
        return str(record["id"])
    return f"#{index}"


async def load_items(
    records: Iterable[Union[VaultRecord, Mapping[str, Any]]],
    key: VaultKey,
) -> VaultLoadResult:
    """Open every record independently.

    A record that fails to decrypt (or is not a valid row) is logged and
    listed in ``failed``; the others are still returned, in store order.
    """

    async def _open_one(index, record):
        try:
            if not isinstance(record, VaultRecord):
                record = VaultRecord.model_validate(record)
            return open_record(record, key), None
        except (DecryptionError, ValidationError) as err:
            item_id = _record_id(record, index)
            logger.error(
                "Failed to decrypt item %s: %s", item_id, type(err).__name__,
            )
            return None, item_id

    result = VaultLoadResult()
    outcomes = await asyncio.gather(
        *(_open_one(i, r) for i, r in enumerate(records))
    )
    for item, failed_id in outcomes:
        if item is not None:
            result.items.append(item)
        else:
            result.failed.append(failed_id)
    logger.info(
        "Vault items loaded: %d opened, %d failed",
        len(result.items), len(result.failed),
    )
    return result
