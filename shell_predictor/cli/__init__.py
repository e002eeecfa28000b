# Demo command-line frontend for shell-predictor

from .console_app import ConsoleApp, PredictorAutoSuggest, PredictorCompleter, RequestCanceller
from .main import cli

__all__ = [
    "ConsoleApp",
    "PredictorAutoSuggest",
    "PredictorCompleter",
    "RequestCanceller",
    "cli",
]
