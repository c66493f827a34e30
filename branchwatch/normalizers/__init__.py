"""Pure text transforms for addresses and opening hours."""
from branchwatch.normalizers.address_normalizer import normalize_address
from branchwatch.normalizers.schedule_normalizer import normalize_xml_working_time

__all__ = ["normalize_address", "normalize_xml_working_time"]
