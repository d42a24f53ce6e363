from .results_tools import build_batch_summary, register_results_tools

__all__ = ["build_batch_summary", "register_results_tools"]
