"""Exceptions raised across parse and store boundaries."""


class GuildSalesError(Exception):
    """Base class for guild sales errors."""


class DumpReadError(GuildSalesError):
    """The dump file could not be read; nothing was parsed."""


class SaleImportError(GuildSalesError):
    """An import batch failed and was rolled back."""
