"""
設定モジュール

config.yamlから読み込んだ設定辞書と、標準の定数を表すデフォルト設定を扱います。

【設定の扱い】
1. DEFAULT_CONFIG：標準の定数（INITIAL_PHEROMONE=0.1, GAMMA=100, RHO=0.2, ...）
2. merge_config：部分的な設定辞書をデフォルトに再帰的に上書き
3. validate_config：範囲外の値を ValueError として検出
"""

import copy
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

DEFAULT_CONFIG: Dict[str, Any] = {
    "aco": {
        "initial_pheromone": 0.1,  # フェロモンの下限値（未登録エントリもこの値として扱う）
        "gamma": 100.0,  # 後方アリのフェロモン付加係数
        "rho": 0.2,  # 揮発率（接続切断ごとに適用）
        "alpha": 0.6,  # フェロモンの重み
        "beta": 0.4,  # ヒューリスティックの重み
        "ttl": None,  # 前方アリの最大ホップ数（Noneで無制限）
        "seed": None,  # 転送判定用乱数のシード
    },
    "heuristic": {
        "m": 0.5,  # 接続変化率の重み
        "n": 0.5,  # 負荷の逆数の重み
        "default_score": 0.5,  # 未評価の隣接ノードのスコア
        "statistics": "constant",  # "constant" または "observed"
        "connectivity_change_rate": 0.5,
        "load": 0.5,
        "window_size": 10,  # 観測モードのリングバッファサイズ
        "load_scale": 10,  # キュー長の正規化係数
    },
    "simulation": {
        "num_nodes": 20,
        "edge_prob": 0.2,  # 潜在的な接触グラフの辺生成確率
        "steps": 500,
        "contact_up_prob": 0.1,
        "contact_down_prob": 0.3,
        "message_prob": 0.05,  # 各ステップでメッセージを生成する確率
        "seed": None,
    },
    "experiment": {
        "name": "aco_dtn_routing",
        "simulations": 5,
    },
    "output": {
        "results_dir": "results",
        "save_graphs": False,
    },
    "logging": {
        "level": "WARNING",
    },
}

STATISTICS_MODES = ("constant", "observed")


def _deep_update(base: Dict, overrides: Dict) -> Dict:
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _deep_update(base[key], value)
        else:
            base[key] = value
    return base


def merge_config(overrides: Optional[Dict] = None) -> Dict:
    """
    部分的な設定辞書をデフォルト設定に再帰的にマージします。

    Args:
        overrides: 上書きする設定（Noneの場合はデフォルトのみ）

    Returns:
        検証済みの新しい設定辞書

    Note:
        DEFAULT_CONFIG自体は変更されません（deepcopyを使用）。
    """
    config = copy.deepcopy(DEFAULT_CONFIG)
    if overrides:
        _deep_update(config, copy.deepcopy(overrides))
    validate_config(config)
    return config


def validate_config(config: Dict) -> None:
    """
    設定値の範囲をチェックします。

    Raises:
        ValueError: 範囲外の値、または未知の統計モードが指定された場合
    """
    aco = config["aco"]
    if not 0.0 <= aco["rho"] <= 1.0:
        raise ValueError(f"aco.rho must be within [0, 1]: {aco['rho']}")
    if aco["initial_pheromone"] <= 0:
        raise ValueError(
            f"aco.initial_pheromone must be positive: {aco['initial_pheromone']}"
        )
    for key in ("gamma", "alpha", "beta"):
        if aco[key] < 0:
            raise ValueError(f"aco.{key} must be non-negative: {aco[key]}")
    if aco["ttl"] is not None and aco["ttl"] < 1:
        raise ValueError(f"aco.ttl must be None or >= 1: {aco['ttl']}")

    heuristic = config["heuristic"]
    if heuristic["statistics"] not in STATISTICS_MODES:
        raise ValueError(f"Unknown statistics mode: {heuristic['statistics']}")
    if heuristic["window_size"] < 1:
        raise ValueError(
            f"heuristic.window_size must be >= 1: {heuristic['window_size']}"
        )
    if heuristic["load_scale"] <= 0:
        raise ValueError(
            f"heuristic.load_scale must be positive: {heuristic['load_scale']}"
        )


def load_config(config_path: Union[str, Path]) -> Dict:
    """
    設定ファイルを読み込む

    Args:
        config_path: 設定ファイルのパス

    Returns:
        デフォルト設定にマージされた設定辞書
    """
    with open(config_path, "r", encoding="utf-8") as f:
        overrides = yaml.safe_load(f) or {}
    return merge_config(overrides)
