"""
Cipherlink - Wire DTOs

Shapes of the response envelope and of each action's decrypted result. Field
names are camelCase on the wire; numeric ids arrive as strings and are coerced.
"""

from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base for decrypted DTOs: camelCase aliases, unknown fields ignored."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class EnvelopeResponse(BaseModel):
    """Outer response. ``result`` is base64 ciphertext when ``success`` is true."""

    model_config = ConfigDict(extra="allow")

    success: StrictBool
    result: str | None = None


class UserInfo(WireModel):
    id: int
    account: str
    pwd: str
    nick_name: str | None = None
    dev_type: int | None = None
    balance: int = 0


class TaskInfo(WireModel):
    task_no: int
    give_coin: int = 0
    task_name: str = ""
    task_type: int | None = None


class CategoryInfo(WireModel):
    id: int
    title: str
    sort: str = ""
    status: int | None = None

    @field_validator("sort", mode="before")
    @classmethod
    def sort_as_text(cls, v: object) -> object:
        # Numeric sort values are kept as text
        return str(v) if isinstance(v, int | float) and not isinstance(v, bool) else v


class SnapshotBook(WireModel):
    id: int
    title: str
    author: str = ""
    note: str = ""
    pic: str = ""
    big_pic: str = ""
    click_count: int = 0
    over_type_dict_text: str = Field(default="", alias="overType_dictText")
    category_id: int
    tags: str = ""


class SnapshotPage(WireModel):
    records: list[SnapshotBook] = Field(default_factory=list)


class ChapterInfo(WireModel):
    id: int
    title: str
    pic: str = ""
    sort: int = 0
    price: int = 0
    pay_mode: int | None = None


class BookInfo(WireModel):
    id: int
    title: str
    author: str = ""
    note: str = ""
    pic: str = ""
    big_pic: str = ""
    praise_count: int = 0
    click_count: int = 0
    fav_count: int = 0
    category_id: int
    sort: int = 0
    tags: str = ""
    ext: list[ChapterInfo] = Field(default_factory=list)


class ChapterContent(WireModel):
    content: list[str]
