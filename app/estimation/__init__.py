from .estimator import WaitEstimate, WaitTimeEstimator, estimate_minutes

__all__ = ["WaitEstimate", "WaitTimeEstimator", "estimate_minutes"]
