"""Contact list formats -- parsing uploads and building output files."""

from .models import SUPPORTED_EXTENSIONS, Contact, ContactFormatError
from .parsers import parse_csv, parse_txt, parse_upload, parse_vcf, parse_xlsx
from .phone import format_phone_number, is_valid_phone_number
from .writers import (
    generate_txt,
    generate_vcf,
    number_contacts,
    sanitize_file_name,
    split_evenly,
    write_txt,
    write_vcf,
)

__all__ = [
    "SUPPORTED_EXTENSIONS",
    "Contact",
    "ContactFormatError",
    "format_phone_number",
    "generate_txt",
    "generate_vcf",
    "is_valid_phone_number",
    "number_contacts",
    "parse_csv",
    "parse_txt",
    "parse_upload",
    "parse_vcf",
    "parse_xlsx",
    "sanitize_file_name",
    "split_evenly",
    "write_txt",
    "write_vcf",
]
