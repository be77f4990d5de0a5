"""
メッセージモジュール

DTNで運ばれるメッセージを表現します。
ルーティングの判断に必要なのは宛先・送信元・現在の保持ノードのみです。
"""

from dataclasses import dataclass, replace
from typing import Hashable, Optional


@dataclass
class Message:
    """
    DTNメッセージ

    Attributes:
        message_id (str): メッセージID（コピー間で共通）
        source (Hashable): 送信元ノード
        destination (Hashable): 最終宛先ノード
        holder (Hashable): 現在このコピーを保持しているノード（省略時は送信元）
        created_at (int): 生成時刻（シミュレーションステップ）
        hops (int): これまでに経由したホップ数
    """

    message_id: str
    source: Hashable
    destination: Hashable
    holder: Optional[Hashable] = None
    created_at: int = 0
    hops: int = 0

    def __post_init__(self):
        if self.holder is None:
            self.holder = self.source

    @property
    def sender(self) -> Hashable:
        return self.source

    def copy_to(self, holder: Hashable) -> "Message":
        """次ホップに渡すコピーを生成します（ホップ数を1増やす）。"""
        return replace(self, holder=holder, hops=self.hops + 1)
