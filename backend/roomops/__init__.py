"""
RoomOps - 房间/预订/账单后台
"""
__version__ = "1.0.0"
