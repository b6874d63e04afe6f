"""State/store layer.

This package owns the extension state snapshot: how partial updates are
merged into it, how derived values are resolved from it, and how it is
reconciled with the storage backend at startup.
"""
