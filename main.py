"""
NL2SQL Pipeline - 主程序入口

交互式运行关键词抽取与 Schema 召回，实时展示各节点进度。
"""
import argparse

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from config import settings
from graph import build_nl2sql_graph, run_pipeline
from graph.constants import (
    INPUT_KEY,
    SQL_GENERATE_OUTPUT,
    KEYWORD_EXTRACT_NODE_OUTPUT,
    EVIDENCES,
    TABLE_DOCUMENTS_FOR_SCHEMA_OUTPUT,
    COLUMN_DOCUMENTS_BY_KEYWORDS_OUTPUT,
    SQL_VALIDATE_NODE_OUTPUT,
    SQL_VALIDATE_EXCEPTION_OUTPUT,
)
from utils.logger import setup_logger, quiet_third_party

console = Console()


def print_banner(include_sql_validate: bool):
    """打印欢迎横幅。"""
    banner = """
╔════════════════════════════════════════════╗
║          NL2SQL Pipeline                   ║
║   关键词抽取 → Schema 召回 → (SQL 校验)     ║
║          Powered by LangGraph              ║
╚════════════════════════════════════════════╝
    """
    console.print(Panel(banner, style="bold blue"))
    console.print("[dim]输入自然语言问题，系统将抽取关键词并召回相关表和列[/dim]")
    if include_sql_validate:
        console.print("[dim]SQL 校验已开启：格式为 '问题 ;; SQL'[/dim]")
    console.print("[dim]输入 'quit' 或 'exit' 退出程序[/dim]\n")


def print_progress(event: dict):
    """打印进度事件。"""
    style = "green" if event["type"] == "complete" else "dim"
    console.print(f"[{style}]  [{event['node']}] {event['message']}[/{style}]")


def print_result(result: dict):
    """打印最终状态摘要。"""
    table = Table(title="执行结果", show_header=True, header_style="bold magenta")
    table.add_column("字段")
    table.add_column("值")

    table.add_row("关键词", ", ".join(result.get(KEYWORD_EXTRACT_NODE_OUTPUT, [])))
    table.add_row("证据", "\n".join(result.get(EVIDENCES, [])) or "-")
    table.add_row("表文档数量", str(len(result.get(TABLE_DOCUMENTS_FOR_SCHEMA_OUTPUT, []))))

    groups = result.get(COLUMN_DOCUMENTS_BY_KEYWORDS_OUTPUT, [])
    keywords = result.get(KEYWORD_EXTRACT_NODE_OUTPUT, [])
    table.add_row(
        "列文档分组",
        "\n".join(f"{kw}: {len(group)}" for kw, group in zip(keywords, groups)) or "-",
    )

    if SQL_VALIDATE_NODE_OUTPUT in result:
        if result[SQL_VALIDATE_NODE_OUTPUT]:
            table.add_row("SQL校验", "[green]通过[/green]")
        else:
            table.add_row("SQL校验", f"[red]失败: {result.get(SQL_VALIDATE_EXCEPTION_OUTPUT, '')}[/red]")

    console.print(table)


def parse_input(text: str) -> dict:
    """解析用户输入，'问题 ;; SQL' 形式时附带待校验的 SQL。"""
    question, _, sql = text.partition(";;")
    state = {INPUT_KEY: question.strip()}
    if sql.strip():
        state[SQL_GENERATE_OUTPUT] = sql.strip()
    return state


def main():
    """主函数。"""
    parser = argparse.ArgumentParser(description="NL2SQL Pipeline")
    parser.add_argument(
        "--sql-validate",
        action="store_true",
        default=settings.sql_validate_enabled,
        help="接入已废弃的 SQL 语法校验节点"
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="日志文件路径"
    )
    args = parser.parse_args()

    setup_logger(level=settings.log_level, log_file=args.log_file)
    quiet_third_party()

    print_banner(args.sql_validate)
    graph = build_nl2sql_graph(include_sql_validate=args.sql_validate)

    while True:
        try:
            question = Prompt.ask("\n[bold green]请输入您的问题[/bold green]")

            if question.lower() in ["quit", "exit", "q"]:
                console.print("\n[yellow]再见！👋[/yellow]")
                break

            if not question.strip():
                continue

            input_state = parse_input(question)
            console.print()
            result = run_pipeline(graph, input_state, on_progress=print_progress)
            print_result(result)

        except KeyboardInterrupt:
            console.print("\n[yellow]程序已中断[/yellow]")
            break
        except Exception as e:
            console.print(f"[red]发生错误: {e}[/red]")
            import traceback
            traceback.print_exc()


if __name__ == "__main__":
    main()
