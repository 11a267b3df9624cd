from .metrics import LayoutMetrics, compute_layout_metrics

__all__ = ['LayoutMetrics', 'compute_layout_metrics']
