"""Domain exceptions."""


class StoreError(Exception):
    """データストア操作の失敗を表す例外

    ネットワーク障害、制約違反、必須行の欠落など、
    データストアが報告した失敗をラップする。
    元の例外は ``__cause__`` に保持される。

    Attributes:
        code: 失敗の種類を示すコード（不明な場合は None）
    """

    NOT_FOUND = "not_found"
    NO_ROW = "no_row"

    def __init__(self, message: str, code: str | None = None) -> None:
        """初期化

        Args:
            message: エラーメッセージ
            code: 失敗の種類を示すコード
        """
        self.code = code
        super().__init__(message)

    @property
    def is_not_found(self) -> bool:
        """対象行が存在しないことによる失敗かどうか"""
        return self.code == self.NOT_FOUND
