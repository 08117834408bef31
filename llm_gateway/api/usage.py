"""按客户端计数的每日请求上限。

计数只保存在进程内存里，日期变化时整体清零；limit 为 0 表示不限制。

reserve() 在同一步里完成检查和占位（中间没有 await），并发请求因此不能
一起越过上限；回答不成功时调用 release() 归还名额。只有 reserve 会写入
记录，只读查询不会为陌生的客户端新建条目。
"""

from dataclasses import dataclass
from datetime import date
from typing import Callable, Dict, Optional

from llm_gateway.domain.exceptions import DailyLimitError


@dataclass
class UsageRecord:
    day: date
    count: int = 0


class DailyUsageCounter:
    def __init__(self, limit: int, today: Callable[[], date] = date.today):
        self.limit = limit
        self._today = today
        self._day: Optional[date] = None
        self._records: Dict[str, UsageRecord] = {}

    def _roll_day(self) -> date:
        """日期变化时丢弃所有旧记录。"""

        today = self._today()
        if self._day != today:
            self._records = {k: r for k, r in self._records.items() if r.day == today}
            self._day = today
        return today

    def count(self, client_id: str) -> int:
        self._roll_day()
        record = self._records.get(client_id)
        return record.count if record else 0

    def snapshot(self, client_id: str) -> Dict[str, int]:
        count = self.count(client_id)
        remaining = max(self.limit - count, 0) if self.limit else -1
        return {"count": count, "limit": self.limit, "remaining": remaining}

    def is_limited(self, client_id: str) -> bool:
        return bool(self.limit) and self.count(client_id) >= self.limit

    def reserve(self, client_id: str) -> UsageRecord:
        """占用一个名额；已达上限时抛 DailyLimitError。"""

        today = self._roll_day()
        record = self._records.get(client_id)
        if self.limit and record is not None and record.count >= self.limit:
            raise DailyLimitError(message=f"Daily limit of {self.limit} requests reached", client=client_id)
        if record is None:
            record = UsageRecord(day=today)
            self._records[client_id] = record
        record.count += 1
        return record

    def release(self, client_id: str) -> None:
        """归还 reserve 占用的名额；跨日后旧名额已随记录清空。"""

        self._roll_day()
        record = self._records.get(client_id)
        if record is None:
            return
        record.count = max(record.count - 1, 0)
        if record.count == 0:
            del self._records[client_id]
