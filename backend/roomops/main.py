"""
RoomOps 主应用入口
房间、预订、服务单、账单与员工任务的后台管理服务
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from roomops import __version__
from roomops.config import settings
from roomops.database import init_db
from roomops.routers import (
    rooms, bookings, service_orders, invoices, tasks, tickets, catalog, history, reports,
)

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    # 初始化数据库（内存存储不需要建表）
    if settings.STORE_BACKEND == "sql":
        init_db()

    # 注册事件处理器
    from roomops.services.event_handlers import register_event_handlers
    register_event_handlers()

    logger.info(f"{settings.APP_NAME} {__version__} started (store={settings.STORE_BACKEND})")
    yield


# 创建应用
app = FastAPI(
    title=f"{settings.APP_NAME} - 房务管理系统",
    description="房间、预订、服务单、账单与员工任务管理",
    version=__version__,
    lifespan=lifespan
)

# CORS 配置
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 注册路由
app.include_router(rooms.router)
app.include_router(bookings.router)
app.include_router(service_orders.router)
app.include_router(invoices.router)
app.include_router(tasks.router)
app.include_router(tickets.router)
app.include_router(catalog.services_router)
app.include_router(catalog.room_types_router)
app.include_router(catalog.buildings_router)
app.include_router(history.router)
app.include_router(reports.router)


@app.get("/")
def root():
    """根路径"""
    return {"name": settings.APP_NAME, "version": __version__}


@app.get("/health")
def health_check():
    """健康检查"""
    return {"status": "healthy"}
