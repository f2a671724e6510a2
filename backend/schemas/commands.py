import json
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


def _strip_required(v: str) -> str:
    v = (v or "").strip()
    if not v:
        raise ValueError("field is required")
    return v


class CommandEnvelope(BaseModel):
    """Outer request body; `data` holds the command JSON as a string."""
    data: str


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class InsertItemData(_Payload):
    info: str = Field(alias="Info")
    quantity: int = Field(alias="Quantity", ge=0)


class AddTagsData(_Payload):
    item: str = Field(alias="Item")
    tags: str = Field(alias="Tags")

    @field_validator("item", "tags")
    @classmethod
    def _required(cls, v: str) -> str:
        return _strip_required(v)


class SetQuantityData(_Payload):
    item: str = Field(alias="Item")
    quantity: int = Field(alias="Quantity", ge=0)

    @field_validator("item")
    @classmethod
    def _required(cls, v: str) -> str:
        return _strip_required(v)


class UpdateQuantityData(SetQuantityData):
    add: bool = Field(alias="Add")


class FindItemCommand(BaseModel):
    command: Literal["FindItem"]
    data: str

    @field_validator("data")
    @classmethod
    def _required(cls, v: str) -> str:
        return _strip_required(v)


class FindTagsCommand(BaseModel):
    command: Literal["FindTags"]
    data: str

    @field_validator("data")
    @classmethod
    def _required(cls, v: str) -> str:
        return _strip_required(v)


class InsertItemCommand(BaseModel):
    command: Literal["InsertItem"]
    data: InsertItemData


class RemoveItemCommand(BaseModel):
    command: Literal["RemoveItem"]
    data: str

    @field_validator("data")
    @classmethod
    def _required(cls, v: str) -> str:
        return _strip_required(v)


class AddTagsCommand(BaseModel):
    command: Literal["AddTags"]
    data: AddTagsData


class UpdateQuantityCommand(BaseModel):
    command: Literal["UpdateQuantity"]
    data: UpdateQuantityData


class SetQuantityCommand(BaseModel):
    command: Literal["SetQuantity"]
    data: SetQuantityData


StorageCommand = Annotated[
    Union[
        FindItemCommand,
        FindTagsCommand,
        InsertItemCommand,
        RemoveItemCommand,
        AddTagsCommand,
        UpdateQuantityCommand,
        SetQuantityCommand,
    ],
    Field(discriminator="command"),
]

_command_adapter = TypeAdapter(StorageCommand)


def decode_command(raw: str) -> StorageCommand:
    """Decode the inner command JSON of an envelope.

    Device clients double-escape quotes, so backslashes are dropped first.
    Raises ValueError (pydantic's ValidationError included) on bad input.
    """
    unescaped = (raw or "").replace("\\", "")
    try:
        payload = json.loads(unescaped)
    except json.JSONDecodeError as e:
        raise ValueError(f"Could not parse command JSON in data tag: {e.msg}") from e
    if not isinstance(payload, dict) or "command" not in payload or "data" not in payload:
        raise ValueError("Could not parse command JSON in data tag")
    return _command_adapter.validate_python(payload)


def command_data_text(command: StorageCommand) -> str:
    """Request data as stored in the command log."""
    if isinstance(command.data, BaseModel):
        return command.data.model_dump_json(by_alias=True)
    return command.data
