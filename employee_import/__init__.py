"""Employee bulk import: Excel workbook -> individual_data / users / job_details."""

__version__ = "0.1.0"
