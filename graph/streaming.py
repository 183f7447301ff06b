"""
流式执行

单次执行工作流，同时产出节点进度事件（custom 流）和节点状态更新（updates 流）。
进度与最终结果来自同一次执行。
"""
from typing import Any, Callable, Iterator, Literal, Optional, TypedDict

from langchain_core.runnables import RunnableConfig

from utils.logger import get_logger
from .progress import ProgressEvent
from .state import Nl2SqlState

logger = get_logger("streaming")


class PipelineEvent(TypedDict):
    """
    工作流事件。
    
    kind="progress" 时 payload 为 ProgressEvent；
    kind="update" 时 payload 为节点返回的状态更新，node 为节点名称。
    """
    kind: Literal["progress", "update"]
    node: str
    payload: dict[str, Any]


def stream_pipeline(
    graph,
    state: Nl2SqlState,
    config: Optional[RunnableConfig] = None,
) -> Iterator[PipelineEvent]:
    """
    执行工作流并逐条产出事件。
    
    Args:
        graph: 编译后的工作流
        state: 初始状态
        config: LangGraph 运行配置
        
    Yields:
        PipelineEvent
    """
    for mode, chunk in graph.stream(state, config, stream_mode=["custom", "updates"]):
        if mode == "custom":
            yield {"kind": "progress", "node": chunk.get("node", ""), "payload": chunk}
        elif mode == "updates":
            for node_name, update in chunk.items():
                yield {"kind": "update", "node": node_name, "payload": update or {}}


def run_pipeline(
    graph,
    state: Nl2SqlState,
    config: Optional[RunnableConfig] = None,
    on_progress: Optional[Callable[[ProgressEvent], None]] = None,
) -> Nl2SqlState:
    """
    执行工作流，转发进度事件并返回合并后的最终状态。
    
    节点异常会直接向上抛出，此时不会返回部分状态。
    
    Args:
        graph: 编译后的工作流
        state: 初始状态
        config: LangGraph 运行配置
        on_progress: 进度回调
        
    Returns:
        最终状态
    """
    final_state: dict[str, Any] = dict(state)
    for event in stream_pipeline(graph, state, config):
        if event["kind"] == "progress":
            if on_progress is not None:
                on_progress(event["payload"])
        else:
            logger.debug(f"[{event['node']}] 状态更新: {list(event['payload'].keys())}")
            final_state.update(event["payload"])
    return final_state
