"""flakefiler -- files issues and bringup PRs for flaky CI builders."""

__version__ = "0.1.0"
