"""Domain entities handed to the workflow layer."""

from dataclasses import dataclass, field

from .schemas import BookInfo, CategoryInfo, ChapterInfo, SnapshotBook, TaskInfo, UserInfo


@dataclass
class User:
    id: int
    username: str
    password: str
    balance: int = 0

    @classmethod
    def from_info(cls, info: UserInfo) -> "User":
        return cls(id=info.id, username=info.account, password=info.pwd, balance=info.balance)


@dataclass
class Task:
    task_no: int
    give_coin: int
    task_name: str

    @classmethod
    def from_info(cls, info: TaskInfo) -> "Task":
        return cls(task_no=info.task_no, give_coin=info.give_coin, task_name=info.task_name)


@dataclass
class Category:
    id: int
    title: str
    sort: str

    @classmethod
    def from_info(cls, info: CategoryInfo) -> "Category":
        return cls(id=info.id, title=info.title, sort=info.sort)


@dataclass
class Chapter:
    id: int
    book_id: int
    title: str
    pic: str
    sort: int
    price: int

    @classmethod
    def from_info(cls, info: ChapterInfo, book_id: int) -> "Chapter":
        return cls(
            id=info.id,
            book_id=book_id,
            title=info.title,
            pic=info.pic,
            sort=info.sort,
            price=info.price,
        )


@dataclass
class Book:
    id: int
    title: str
    author: str
    note: str
    pic: str
    big_pic: str
    category_id: int
    praise_count: int = 0
    click_count: int = 0
    favorite_count: int = 0
    over_type: str = ""
    sort: int = 0
    tags: str = ""
    chapters: list[Chapter] = field(default_factory=list)

    @classmethod
    def from_snapshot(cls, info: SnapshotBook) -> "Book":
        """Catalog-page entry: no counters beyond clicks, no chapters."""
        return cls(
            id=info.id,
            title=info.title,
            author=info.author,
            note=info.note,
            pic=info.pic,
            big_pic=info.big_pic,
            category_id=info.category_id,
            click_count=info.click_count,
            over_type=info.over_type_dict_text,
            tags=info.tags,
        )

    @classmethod
    def from_info(cls, info: BookInfo) -> "Book":
        return cls(
            id=info.id,
            title=info.title,
            author=info.author,
            note=info.note,
            pic=info.pic,
            big_pic=info.big_pic,
            category_id=info.category_id,
            praise_count=info.praise_count,
            click_count=info.click_count,
            favorite_count=info.fav_count,
            sort=info.sort,
            tags=info.tags,
            chapters=[Chapter.from_info(chapter, info.id) for chapter in info.ext],
        )
