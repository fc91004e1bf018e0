"""
通用的序列化工具
"""
from datetime import datetime, timezone, timedelta
from typing import Optional

# 中国时区 UTC+8
CHINA_TZ = timezone(timedelta(hours=8))


def format_datetime_local(dt: Optional[datetime]) -> Optional[str]:
    """将UTC时间转换为本地时间字符串"""
    if dt is None:
        return None
    # 如果时间没有时区信息，假设它是 UTC
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    local_dt = dt.astimezone(CHINA_TZ)
    return local_dt.strftime("%Y-%m-%d %H:%M:%S")


# 单个商品数量上限（库存、消耗、标准库存）
MAX_QUANTITY = 9999
