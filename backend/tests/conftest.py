"""
Pytest 配置和共享 fixtures

应用的引擎在导入时按 DATABASE_URL 创建，必须在导入 roomops 之前指向内存库。
"""
import os

os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["STORE_BACKEND"] = "sql"

import pytest
from typing import Generator, List
from fastapi.testclient import TestClient

from roomops.core.event_bus import Event
from roomops.database import Base, SessionLocal, engine
from roomops.models import ontology  # noqa
from roomops.services.room_service import RoomService
from roomops.stores import Stores, memory_stores, sql_stores
from roomops.main import app


@pytest.fixture(scope="function")
def db_engine():
    """应用引擎（内存库），每个测试重建表"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(db_engine):
    """创建数据库会话"""
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def sql_bundle(db_session) -> Stores:
    """基于数据库会话的存储"""
    return sql_stores(db_session)


@pytest.fixture
def stores() -> Stores:
    """全新的内存存储"""
    return memory_stores()


@pytest.fixture
def events() -> List[Event]:
    """收集服务发布的事件"""
    return []


@pytest.fixture
def publish(events):
    """注入服务的事件发布器"""
    return events.append


@pytest.fixture(scope="function")
def client(db_engine) -> Generator[TestClient, None, None]:
    """创建测试客户端"""
    with TestClient(app) as test_client:
        yield test_client


# ============== 数据 Fixtures ==============

@pytest.fixture
def sample_room(stores):
    """A101，容纳 2 人"""
    return RoomService(stores, lambda e: None).create_room("A101", 2, "A栋")
