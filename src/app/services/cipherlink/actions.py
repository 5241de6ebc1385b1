"""
Cipherlink - Remote Actions

Each action builds its request object (action fields plus a fresh
``timeStamp``), calls its path through the ProtocolClient and maps the
decrypted DTO to a domain entity. Errors from the client propagate untouched.
"""

import logging
from typing import Any

from .client import ProtocolClient
from .models import Book, Category, Task, User
from .schemas import BookInfo, CategoryInfo, ChapterContent, SnapshotPage, TaskInfo, UserInfo
from .signature import api_path

logger = logging.getLogger(__name__)

# ============================================
# Action paths
# ============================================
REGISTER_USER = api_path("user/regUser")
USER_INFO = api_path("user/getUserInfo")
TASK_LIST = api_path("user/getTaskList")
CATEGORY_LIST = api_path("h5/getCategory")
SNAPSHOT_LIST = api_path("h5/getComicByCategoryId")
COMIC_INFO = api_path("h5/getComicInfo")
CHAPTER_CONTENT = api_path("h5/getChapterContent")
PAY_CHAPTER = api_path("user/coinPay")
DAILY_SIGN = api_path("user/checkSign")
TASK_REWARD = api_path("user/getTaskReward")

DEFAULT_DEV_TYPE = "3"
DEFAULT_CHAPTER_LIMIT = 5
CATEGORY_CHANNEL = "yml"


class CatalogActions:
    """Business actions of the catalog API on top of one ProtocolClient.

    Usage:
        actions = CatalogActions(client)
        user = await actions.register_user()
        for task in await actions.task_list(user.id):
            await actions.claim_task_reward(user.id, task.task_no)
    """

    def __init__(self, client: ProtocolClient, dev_type: str | None = None) -> None:
        self._client = client
        self._dev_type = dev_type or client.config.get("devType") or DEFAULT_DEV_TYPE

    @property
    def client(self) -> ProtocolClient:
        return self._client

    def _payload(self, **fields: Any) -> dict[str, Any]:
        fields["timeStamp"] = self._client.timestamp_str()
        return fields

    async def register_user(self) -> User:
        """Register a throwaway account."""
        info = await self._client.call(REGISTER_USER, self._payload(devType=self._dev_type), UserInfo)
        logger.info(f"Registered user {info.id}")
        return User.from_info(info)

    async def user_info(self, user_id: int) -> User:
        info = await self._client.call(USER_INFO, self._payload(userId=user_id), UserInfo)
        return User.from_info(info)

    async def task_list(self, user_id: int) -> list[Task]:
        infos = await self._client.call(TASK_LIST, self._payload(userId=user_id), list[TaskInfo])
        return [Task.from_info(info) for info in infos]

    async def category_list(self) -> list[Category]:
        infos = await self._client.call(CATEGORY_LIST, self._payload(c=CATEGORY_CHANNEL), list[CategoryInfo])
        return [Category.from_info(info) for info in infos]

    async def snapshot_list(self, category_id: int, page: int = 1, limit: int = 20) -> list[Book]:
        """One catalog page of a category. Entries carry no chapters."""
        payload = self._payload(page=page, limit=limit, categoryId=category_id)
        snapshot = await self._client.call(SNAPSHOT_LIST, payload, SnapshotPage)
        logger.debug(f"Category {category_id} page {page}: {len(snapshot.records)} books")
        return [Book.from_snapshot(record) for record in snapshot.records]

    async def comic_info(self, comic_id: int, limit: int = DEFAULT_CHAPTER_LIMIT) -> Book:
        """Title detail including its chapter list."""
        info = await self._client.call(COMIC_INFO, self._payload(comicId=comic_id, limit=limit), BookInfo)
        return Book.from_info(info)

    async def chapter_content(self, chapter_id: int, user_id: int) -> list[str]:
        """Image URLs of a chapter the user may read."""
        payload = self._payload(chapterId=chapter_id, userId=user_id)
        content = await self._client.call(CHAPTER_CONTENT, payload, ChapterContent)
        return content.content

    async def pay_chapter(self, user_id: int, comic_id: int, chapter_id: int) -> None:
        payload = self._payload(userId=user_id, comicId=comic_id, chapterId=chapter_id)
        await self._client.call(PAY_CHAPTER, payload, parse_json=False)
        logger.info(f"User {user_id} paid chapter {chapter_id} of comic {comic_id}")

    async def daily_sign(self, user_id: int) -> None:
        await self._client.call(DAILY_SIGN, self._payload(userId=user_id), parse_json=False)

    async def claim_task_reward(self, user_id: int, task_no: int) -> None:
        await self._client.call(TASK_REWARD, self._payload(userId=user_id, taskNo=task_no), parse_json=False)
