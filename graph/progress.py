"""
节点进度事件

节点执行过程中通过 LangGraph 的 custom 流输出可读的状态消息，
供界面实时展示。事件只用于观察，不会被其他节点读取。
"""
from typing import Any, Callable, Iterable, Literal, TypedDict

from utils.logger import get_logger

logger = get_logger("progress")

# 列表展示时使用的分隔符
DISPLAY_DELIMITER = ","


class ProgressEvent(TypedDict):
    """单条进度事件。"""
    node: str
    type: Literal["status", "complete"]
    message: str


class ProgressClosedError(RuntimeError):
    """进度流已结束后继续写入。"""


def join_items(items: Iterable[Any], delimiter: str = DISPLAY_DELIMITER) -> str:
    """将列表拼接为展示文本。"""
    return delimiter.join(str(item) for item in items)


class ProgressReporter:
    """
    单次节点执行的进度流。
    
    status() 可调用多次，complete() 必须且只能调用一次，且是最后一条事件。
    """
    
    def __init__(self, node_name: str, writer: Callable[[Any], None]):
        self.node_name = node_name
        self._writer = writer
        self._completed = False
    
    @property
    def completed(self) -> bool:
        return self._completed
    
    def _emit(self, event_type: str, message: str) -> None:
        if self._completed:
            raise ProgressClosedError(f"[{self.node_name}] 进度流已结束，无法继续写入: {message}")
        event: ProgressEvent = {"node": self.node_name, "type": event_type, "message": message}
        logger.debug(f"[{self.node_name}] {message}")
        self._writer(event)
    
    def status(self, message: str) -> None:
        """输出一条状态消息。"""
        self._emit("status", message)
    
    def complete(self, message: str) -> None:
        """输出完成消息并关闭进度流。"""
        self._emit("complete", message)
        self._completed = True
