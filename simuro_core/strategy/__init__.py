from simuro_core.strategy.abstract_strategy import AbstractStrategy
from simuro_core.strategy.rpc_strategy import RPCStrategy
from simuro_core.strategy.strategy_manager import StrategyManager

__all__ = ["AbstractStrategy", "RPCStrategy", "StrategyManager"]
