"""Services for draining pending platform dumps."""

from opal_dump.services.dump_processor import acknowledge_dump, process_dump, read_dump_payload
from opal_dump.services.extractor import DumpExtractor

__all__ = [
    "DumpExtractor",
    "acknowledge_dump",
    "process_dump",
    "read_dump_payload",
]
