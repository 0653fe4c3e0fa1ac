from .reader import MalformedFileError, read_employee_rows

__all__ = ["MalformedFileError", "read_employee_rows"]
