"""
Unit tests for Cipherlink remote actions.

Each action is checked for its path, its request fields (always including
timeStamp) and the DTO to entity mapping.
"""

import json

import pytest

from src.app.services.cipherlink import actions as actions_module
from src.app.services.cipherlink.actions import CatalogActions
from src.app.services.cipherlink.client import ProtocolClient
from src.app.services.cipherlink.config import ProtocolConfig
from src.app.services.cipherlink.exceptions import ProtocolError
from src.app.services.cipherlink.models import Book, Category, Chapter, Task, User


# =============================================================================
# FIXTURES
# =============================================================================
@pytest.fixture
def catalog(protocol_config, make_transport, fixed_clock, success_body):
    """Build (actions, transport) answering every call with the given result."""

    def _build(result, config: ProtocolConfig | None = None, dev_type: str | None = None):
        transport = make_transport(reply=success_body(result))
        client = ProtocolClient(config or protocol_config, transport, clock=fixed_clock)
        return CatalogActions(client, dev_type=dev_type), transport

    return _build


def _sent(transport, codec) -> tuple[str, dict]:
    """Path and decrypted payload of the single recorded call."""
    url, _, body = transport.posts[0]
    path = url.removeprefix("https://api.example.com").split("?")[0]
    return path, json.loads(codec.decrypt(json.loads(body)["data"]))


USER = {"id": "101", "account": "u101", "pwd": "pw", "nickName": "n", "devType": "3", "balance": 25}


# =============================================================================
# PATH TESTS
# =============================================================================
class TestActionPaths:
    """Tests for the action path constants."""

    @pytest.mark.parametrize(
        ("name", "path"),
        [
            ("REGISTER_USER", "/api/user/regUser"),
            ("USER_INFO", "/api/user/getUserInfo"),
            ("TASK_LIST", "/api/user/getTaskList"),
            ("CATEGORY_LIST", "/api/h5/getCategory"),
            ("SNAPSHOT_LIST", "/api/h5/getComicByCategoryId"),
            ("COMIC_INFO", "/api/h5/getComicInfo"),
            ("CHAPTER_CONTENT", "/api/h5/getChapterContent"),
            ("PAY_CHAPTER", "/api/user/coinPay"),
            ("DAILY_SIGN", "/api/user/checkSign"),
            ("TASK_REWARD", "/api/user/getTaskReward"),
        ],
    )
    def test_path(self, name: str, path: str) -> None:
        assert getattr(actions_module, name) == path


# =============================================================================
# USER ACTION TESTS
# =============================================================================
class TestUserActions:
    """Tests for register_user and user_info."""

    @pytest.mark.asyncio
    async def test_register_user(self, catalog, codec) -> None:
        actions, transport = catalog(USER)
        user = await actions.register_user()

        assert user == User(id=101, username="u101", password="pw", balance=25)
        path, payload = _sent(transport, codec)
        assert path == "/api/user/regUser"
        assert payload == {"devType": "3", "timeStamp": "1700000000"}

    @pytest.mark.asyncio
    async def test_dev_type_from_config_extras(self, catalog, codec, protocol_values) -> None:
        config = ProtocolConfig.from_mapping({**protocol_values, "devType": "5"})
        actions, transport = catalog(USER, config=config)
        await actions.register_user()
        assert _sent(transport, codec)[1]["devType"] == "5"

    @pytest.mark.asyncio
    async def test_explicit_dev_type_wins(self, catalog, codec, protocol_values) -> None:
        config = ProtocolConfig.from_mapping({**protocol_values, "devType": "5"})
        actions, transport = catalog(USER, config=config, dev_type="9")
        await actions.register_user()
        assert _sent(transport, codec)[1]["devType"] == "9"

    @pytest.mark.asyncio
    async def test_user_info(self, catalog, codec) -> None:
        actions, transport = catalog(USER)
        user = await actions.user_info(101)

        assert user.balance == 25
        path, payload = _sent(transport, codec)
        assert path == "/api/user/getUserInfo"
        assert payload == {"userId": 101, "timeStamp": "1700000000"}

    @pytest.mark.asyncio
    async def test_registration_failure_surfaces(self, protocol_config, make_transport) -> None:
        """Test a rejected registration raises so a farming loop can stop."""
        client = ProtocolClient(protocol_config, make_transport(reply='{"success":false,"msg":"limit"}'))
        with pytest.raises(ProtocolError) as exc_info:
            await CatalogActions(client).register_user()
        assert exc_info.value.action_path == "/api/user/regUser"


# =============================================================================
# TASK ACTION TESTS
# =============================================================================
class TestTaskActions:
    """Tests for task_list, daily_sign and claim_task_reward."""

    @pytest.mark.asyncio
    async def test_task_list(self, catalog, codec) -> None:
        actions, transport = catalog(
            [
                {"id": "1", "taskNo": 1, "taskType": 2, "giveCoin": 10, "taskName": "Sign in"},
                {"id": "2", "taskNo": "3", "giveCoin": "20", "taskName": "Share"},
            ]
        )
        tasks = await actions.task_list(101)

        assert tasks == [
            Task(task_no=1, give_coin=10, task_name="Sign in"),
            Task(task_no=3, give_coin=20, task_name="Share"),
        ]
        path, payload = _sent(transport, codec)
        assert path == "/api/user/getTaskList"
        assert payload == {"userId": 101, "timeStamp": "1700000000"}

    @pytest.mark.asyncio
    async def test_daily_sign(self, catalog, codec) -> None:
        actions, transport = catalog("ok")
        assert await actions.daily_sign(101) is None
        path, payload = _sent(transport, codec)
        assert path == "/api/user/checkSign"
        assert payload == {"userId": 101, "timeStamp": "1700000000"}

    @pytest.mark.asyncio
    async def test_claim_task_reward(self, catalog, codec) -> None:
        actions, transport = catalog({"coin": 10})
        await actions.claim_task_reward(101, 3)
        path, payload = _sent(transport, codec)
        assert path == "/api/user/getTaskReward"
        assert payload == {"userId": 101, "taskNo": 3, "timeStamp": "1700000000"}


# =============================================================================
# CATALOG ACTION TESTS
# =============================================================================
class TestCatalogActions:
    """Tests for category_list, snapshot_list and comic_info."""

    @pytest.mark.asyncio
    async def test_category_list(self, catalog, codec) -> None:
        actions, transport = catalog([{"id": "4", "title": "Romance", "status": 1, "sort": "2", "createBy": "x"}])
        categories = await actions.category_list()

        assert categories == [Category(id=4, title="Romance", sort="2")]
        path, payload = _sent(transport, codec)
        assert path == "/api/h5/getCategory"
        assert payload == {"c": "yml", "timeStamp": "1700000000"}

    @pytest.mark.asyncio
    async def test_snapshot_list(self, catalog, codec) -> None:
        record = {
            "id": "88",
            "title": "Title",
            "author": "Author",
            "note": "Note",
            "pic": "p.jpg",
            "bigPic": "bp.jpg",
            "clickCount": 900,
            "overType_dictText": "Ongoing",
            "categoryId": "4",
            "tags": "a,b",
            "isSyn": 0,
        }
        actions, transport = catalog({"records": [record], "total": 1})
        books = await actions.snapshot_list(4, page=2, limit=10)

        assert len(books) == 1
        book = books[0]
        assert (book.id, book.category_id, book.click_count) == (88, 4, 900)
        assert book.over_type == "Ongoing"
        assert book.big_pic == "bp.jpg"
        assert book.chapters == []
        path, payload = _sent(transport, codec)
        assert path == "/api/h5/getComicByCategoryId"
        assert payload == {"page": 2, "limit": 10, "categoryId": 4, "timeStamp": "1700000000"}

    @pytest.mark.asyncio
    async def test_comic_info(self, catalog, codec) -> None:
        info = {
            "id": "88",
            "title": "Title",
            "author": "Author",
            "note": "Note",
            "pic": "p.jpg",
            "bigPic": "bp.jpg",
            "praiseCount": 5,
            "clickCount": 900,
            "favCount": 7,
            "categoryId": "4",
            "sort": 1,
            "tags": "a",
            "ext": [
                {"id": "1001", "title": "Ch 1", "pic": "c1.jpg", "sort": 1, "price": 0, "payMode": 0},
                {"id": "1002", "title": "Ch 2", "pic": "c2.jpg", "sort": 2, "price": 30, "payMode": 1},
            ],
        }
        actions, transport = catalog(info)
        book = await actions.comic_info(88)

        assert isinstance(book, Book)
        assert (book.praise_count, book.favorite_count) == (5, 7)
        assert book.chapters == [
            Chapter(id=1001, book_id=88, title="Ch 1", pic="c1.jpg", sort=1, price=0),
            Chapter(id=1002, book_id=88, title="Ch 2", pic="c2.jpg", sort=2, price=30),
        ]
        path, payload = _sent(transport, codec)
        assert path == "/api/h5/getComicInfo"
        assert payload == {"comicId": 88, "limit": 5, "timeStamp": "1700000000"}


# =============================================================================
# CONTENT ACTION TESTS
# =============================================================================
class TestContentActions:
    """Tests for pay_chapter and chapter_content."""

    @pytest.mark.asyncio
    async def test_pay_chapter(self, catalog, codec) -> None:
        actions, transport = catalog("paid")
        await actions.pay_chapter(101, 88, 1002)
        path, payload = _sent(transport, codec)
        assert path == "/api/user/coinPay"
        assert payload == {"userId": 101, "comicId": 88, "chapterId": 1002, "timeStamp": "1700000000"}

    @pytest.mark.asyncio
    async def test_chapter_content(self, catalog, codec) -> None:
        actions, transport = catalog({"content": ["https://img/1.jpg", "https://img/2.jpg"]})
        items = await actions.chapter_content(1002, 101)

        assert items == ["https://img/1.jpg", "https://img/2.jpg"]
        path, payload = _sent(transport, codec)
        assert path == "/api/h5/getChapterContent"
        assert payload == {"chapterId": 1002, "userId": 101, "timeStamp": "1700000000"}
