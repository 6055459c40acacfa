"""Text contrast evaluation: lightweight, contrast range and heuristic stages."""

from contrast_checker.evaluation.check import evaluate_element, run_check

__all__ = ['evaluate_element', 'run_check']
