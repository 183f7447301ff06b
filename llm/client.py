"""
LLM Client wrapper using LangChain.

统一管理 ChatOpenAI 与 OpenAIEmbeddings 实例的创建。
"""
from typing import Optional
from langchain_openai import ChatOpenAI, OpenAIEmbeddings
from dotenv import load_dotenv

from config import settings

# 确保环境变量被正确加载
load_dotenv()


def create_model(
    model_name: Optional[str] = None,
    temperature: float = 0.0,
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
    timeout: Optional[float] = None,
    max_retries: Optional[int] = None,
) -> ChatOpenAI:
    """
    通用的 Chat 模型创建工厂函数，默认使用 settings 中的 LLM 配置。
    
    Args:
        model_name: 模型名称，默认使用 settings.llm_model
        temperature: 模型温度，默认 0.0（结构化输出建议使用低温度）
        api_key: API密钥，默认使用 LLM_API_KEY
        base_url: 基础URL，默认使用 LLM_BASE_URL
        timeout: 请求超时时间（秒），默认使用 LLM_TIMEOUT
        max_retries: 最大重试次数，默认使用 LLM_MAX_RETRIES
    
    Returns:
        ChatOpenAI: 配置好的模型实例
    """
    return ChatOpenAI(
        model=model_name or settings.llm_model,
        api_key=api_key or settings.llm_api_key,
        base_url=base_url or settings.llm_base_url,
        temperature=temperature,
        timeout=timeout if timeout is not None else settings.llm_timeout,
        max_retries=max_retries if max_retries is not None else settings.llm_max_retries,
    )


def create_embedding_model(
    model_name: Optional[str] = None,
    api_key: Optional[str] = None,
    base_url: Optional[str] = None
) -> OpenAIEmbeddings:
    """
    通用的 Embedding 模型创建工厂函数。
    
    Args:
        model_name: 嵌入模型名称，默认使用 settings.embedding_model
        api_key: API密钥，默认使用 LLM_API_KEY
        base_url: 基础URL，默认使用 LLM_BASE_URL
    
    Returns:
        OpenAIEmbeddings: 配置好的 OpenAIEmbeddings 实例
    """
    return OpenAIEmbeddings(
        model=model_name or settings.embedding_model,
        api_key=api_key or settings.llm_api_key,
        base_url=base_url or settings.llm_base_url,
    )
