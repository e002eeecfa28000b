# shell-predictor: inline command-line suggestions

from .host import PredictorHost, create_strategy

__all__ = ["PredictorHost", "create_strategy"]
