class XspError(Exception):
    """Base class for conversion failures."""


class ConfigError(XspError):
    pass


class ImageError(XspError):
    pass


class CapacityError(XspError):
    def __init__(self, table: str, limit: int):
        super().__init__(f"{table} is full ({limit} max)")
        self.table = table
        self.limit = limit


class OutputError(XspError):
    def __init__(self, path, reason):
        super().__init__(f"couldn't write {path}: {reason}")
        self.path = path


class ScanError(XspError):
    """A row had data but no column in its 16-row band did."""
