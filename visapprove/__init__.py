"""visapprove - review-comment driven sign-off for visual regression artifacts."""

__version__ = "0.1.0"
