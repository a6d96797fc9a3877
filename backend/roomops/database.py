"""
数据库配置 - SQLAlchemy 持久化层
业务服务不直接访问会话，通过 roomops.stores 中的 Store 读写
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from roomops.config import settings


def _create_engine(url: str):
    """SQLite 需要关闭线程检查；内存库必须共享同一个连接"""
    if not url.startswith("sqlite"):
        return create_engine(url, pool_pre_ping=True)
    kwargs = {"connect_args": {"check_same_thread": False}}
    if ":memory:" in url or url == "sqlite://":
        kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


engine = _create_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db():
    """初始化数据库表"""
    from roomops.models import ontology  # noqa
    Base.metadata.create_all(bind=engine)
