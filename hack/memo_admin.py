#!/usr/bin/env python3
"""Memo administration script for memopad.

memos テーブルの内容を確認・初期化するCLIツール。

Usage:
    python hack/memo_admin.py list [--category CATEGORY]
    python hack/memo_admin.py search QUERY
    python hack/memo_admin.py show MEMO_ID
    python hack/memo_admin.py clear --yes
"""

import argparse
import asyncio
import json
import sys
from datetime import datetime

from memopad.config import ConfigError, load_config, resolve_config_path
from memopad.domain.entities import Memo
from memopad.infrastructure.persistence import DatabaseManager, SQLMemoRepository
from memopad.presentation import memo_to_dict


class TableFormatter:
    """シンプルなテキストテーブルフォーマッター"""

    def __init__(self, max_width: int = 40) -> None:
        self._max_width = max_width

    def truncate(self, text: str, width: int | None = None) -> str:
        """テキストを指定幅で切り詰める"""
        width = width or self._max_width
        text = text.replace("\n", " ")
        if len(text) <= width:
            return text
        return text[: width - 3] + "..."

    def format_datetime(self, dt: datetime) -> str:
        """日時を読みやすい形式に変換"""
        return dt.strftime("%Y-%m-%d %H:%M:%S")

    def print_memos(self, memos: list[Memo]) -> None:
        """メモの一覧をテーブルで出力"""
        if not memos:
            print("(no data)")
            return

        headers = ["id", "title", "category", "tags", "created_at"]
        rows = [
            [
                memo.id[:8],
                self.truncate(memo.title),
                memo.category_label,
                self.truncate(", ".join(memo.tags), 30),
                self.format_datetime(memo.created_at),
            ]
            for memo in memos
        ]

        widths = [len(h) for h in headers]
        for row in rows:
            for i, cell in enumerate(row):
                widths[i] = max(widths[i], len(cell))

        print(" | ".join(h.ljust(widths[i]) for i, h in enumerate(headers)))
        print("-+-".join("-" * w for w in widths))
        for row in rows:
            print(" | ".join(cell.ljust(widths[i]) for i, cell in enumerate(row)))

        print(f"\nTotal: {len(rows)} records")


async def run_command(args: argparse.Namespace, repository: SQLMemoRepository) -> int:
    """サブコマンドを実行する"""
    formatter = TableFormatter()

    if args.command == "list":
        if args.category:
            memos = await repository.list_by_category(args.category)
        else:
            memos = await repository.list_all()
        formatter.print_memos(memos)
    elif args.command == "search":
        formatter.print_memos(await repository.search(args.query))
    elif args.command == "show":
        memo = await repository.get_by_id(args.memo_id)
        if memo is None:
            print(f"Memo not found: {args.memo_id}", file=sys.stderr)
            return 1
        print(json.dumps(memo_to_dict(memo), ensure_ascii=False, indent=2))
    elif args.command == "clear":
        if not args.yes:
            print("Refusing to delete all memos without --yes", file=sys.stderr)
            return 1
        await repository.clear_all()
        print("All memos deleted")
    return 0


async def main(args: argparse.Namespace) -> int:
    """設定を読み込み、コマンドを実行する"""
    try:
        config_path = args.config or resolve_config_path()
        config = load_config(config_path)
    except (ConfigError, FileNotFoundError) as e:
        print(f"Failed to load config: {e}", file=sys.stderr)
        return 1

    db_manager = DatabaseManager.from_config(config.database)
    await db_manager.create_tables()
    try:
        return await run_command(args, SQLMemoRepository(db_manager.get_session))
    finally:
        await db_manager.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="memopad memo administration")
    parser.add_argument(
        "--config", help="config file path (default: $MEMOPAD_CONFIG or config.yaml)"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="list memos")
    list_parser.add_argument("--category", help="filter by category")

    search_parser = subparsers.add_parser("search", help="search memos")
    search_parser.add_argument("query")

    show_parser = subparsers.add_parser("show", help="show a memo as JSON")
    show_parser.add_argument("memo_id")

    clear_parser = subparsers.add_parser("clear", help="delete every memo")
    clear_parser.add_argument("--yes", action="store_true", help="confirm deletion")

    return parser


if __name__ == "__main__":
    sys.exit(asyncio.run(main(build_parser().parse_args())))
